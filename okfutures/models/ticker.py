"""Pydantic model for the 'futures/ticker' websocket table."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class FuturesTicker(BaseModel):
    """A ticker update from the 'futures/ticker' table.

    Numeric fields are kept as the decimal strings the exchange sends.
    """

    instrument_id: str
    last: str
    last_qty: str | None = None
    best_bid: str
    best_bid_size: str | None = None
    best_ask: str
    best_ask_size: str | None = None
    open_24h: str | None = None
    high_24h: str | None = None
    low_24h: str | None = None
    volume_24h: str | None = None
    volume_token_24h: str | None = None
    open_interest: str | None = None
    timestamp: str = Field(description="ISO 8601 timestamp")

    model_config = {"frozen": True}

    @property
    def ts(self) -> datetime:
        return datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
