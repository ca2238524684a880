"""Pydantic model for the 'futures/order' websocket table."""

from __future__ import annotations

from pydantic import BaseModel, Field

# Values of the 'state' field.
ORDER_STATES: dict[str, str] = {
    "-2": "failed",
    "-1": "canceled",
    "0": "open",
    "1": "partially_filled",
    "2": "fully_filled",
    "3": "submitting",
    "4": "canceling",
}


class FuturesOrder(BaseModel):
    """An order update pushed on the 'futures/order' table."""

    instrument_id: str
    order_id: str
    client_oid: str = ""
    price: str
    size: str
    filled_qty: str = "0"
    price_avg: str = "0"
    fee: str = "0"
    pnl: str = "0"
    type: str = Field(description="1 open long, 2 open short, 3 close long, 4 close short")
    order_type: str = "0"
    state: str
    status: str | None = None
    leverage: str | None = None
    contract_val: str | None = None
    last_fill_px: str = "0"
    last_fill_qty: str = "0"
    last_fill_id: str = "0"
    last_fill_time: str | None = None
    error_code: str = "0"
    timestamp: str = Field(description="ISO 8601 timestamp")

    model_config = {"frozen": True}

    @property
    def state_name(self) -> str:
        return ORDER_STATES.get(self.state, "unknown")

    @property
    def is_final(self) -> bool:
        return self.state in ("-2", "-1", "2")
