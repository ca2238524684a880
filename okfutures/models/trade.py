"""Pydantic model for trades from the 'futures/trade' websocket table."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class FuturesTrade(BaseModel):
    """A single public trade from the 'futures/trade' table."""

    instrument_id: str
    trade_id: str
    price: str
    qty: str = Field(description="Contract count as a decimal string")
    side: Literal["buy", "sell"]
    timestamp: str = Field(description="ISO 8601 timestamp")

    model_config = {"frozen": True}

    @property
    def ts(self) -> datetime:
        return datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
