"""Pydantic model for the 'futures/account' websocket table."""

from __future__ import annotations

from pydantic import BaseModel

# Currency keys the account table may populate, in lookup order.
ACCOUNT_CURRENCIES: tuple[str, ...] = ("BTC", "ETH", "ETC", "XRP", "EOS", "BCH", "BSV", "TRX")


class FuturesAccount(BaseModel):
    """Coin-margined futures balance for one currency.

    Fixed-margin accounts send a per-contract breakdown in 'contracts';
    crossed-margin accounts send the flat fields.
    """

    currency: str
    underlying: str | None = None
    equity: str | None = None
    available: str | None = None
    can_withdraw: str | None = None
    total_avail_balance: str | None = None
    margin: str | None = None
    margin_frozen: str | None = None
    margin_for_unfilled: str | None = None
    margin_mode: str | None = None
    margin_ratio: str | None = None
    maint_margin_ratio: str | None = None
    liqui_mode: str | None = None
    open_max: str | None = None
    realized_pnl: str | None = None
    unrealized_pnl: str | None = None
    auto_margin: str | None = None
    contracts: list[dict] | None = None
    timestamp: str | None = None

    model_config = {"frozen": True}
