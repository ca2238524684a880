"""Pydantic models for the 'futures/depth_l2_tbt' order book table."""

from __future__ import annotations

from typing import Literal, NamedTuple

from pydantic import BaseModel, Field

DepthAction = Literal["partial", "update"]


class PriceLevel(NamedTuple):
    """One book row as sent on the wire: [price, size, liquidated_orders, num_orders]."""

    price: str
    size: str
    liquidated_orders: str
    num_orders: str

    @property
    def is_removal(self) -> bool:
        """In an 'update' a size of zero means the level was removed."""
        return self.size == "0"


class DepthL2Tbt(BaseModel):
    """A tick-by-tick L2 book message for one instrument.

    With action 'partial' asks/bids hold the full ladder (up to 400 levels).
    With action 'update' they hold only the changed levels, zero-size rows
    included. Rows are forwarded as received; no book is maintained here.
    """

    instrument_id: str
    asks: list[PriceLevel] = Field(default_factory=list)
    bids: list[PriceLevel] = Field(default_factory=list)
    timestamp: str = Field(description="ISO 8601 timestamp")
    checksum: int | None = Field(default=None, description="CRC32 of the top 25 levels")

    model_config = {"frozen": True}


class DepthL2TbtResult(BaseModel):
    """Table envelope for the order book: action plus the book messages."""

    table: str
    action: DepthAction
    data: list[DepthL2Tbt]

    model_config = {"frozen": True}
