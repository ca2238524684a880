"""Pydantic model for the 'futures/position' websocket table."""

from __future__ import annotations

from pydantic import BaseModel


class FuturesPosition(BaseModel):
    """Long and short legs of a futures position for one instrument."""

    instrument_id: str
    margin_mode: str | None = None
    leverage: str | None = None
    liquidation_price: str | None = None
    realised_pnl: str | None = None

    long_qty: str | None = None
    long_avail_qty: str | None = None
    long_avg_cost: str | None = None
    long_settlement_price: str | None = None
    long_margin: str | None = None
    long_pnl: str | None = None
    long_pnl_ratio: str | None = None
    long_unrealised_pnl: str | None = None
    long_settled_pnl: str | None = None
    long_leverage: str | None = None
    long_liqui_price: str | None = None

    short_qty: str | None = None
    short_avail_qty: str | None = None
    short_avg_cost: str | None = None
    short_settlement_price: str | None = None
    short_margin: str | None = None
    short_pnl: str | None = None
    short_pnl_ratio: str | None = None
    short_unrealised_pnl: str | None = None
    short_settled_pnl: str | None = None
    short_leverage: str | None = None
    short_liqui_price: str | None = None

    last: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    model_config = {"frozen": True}
