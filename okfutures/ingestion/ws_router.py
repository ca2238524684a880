"""Routes incoming WebSocket messages to appropriate handlers by table or event."""

from __future__ import annotations

from okfutures.ingestion.codec import (
    EVENT_ERROR,
    EVENT_LOGIN,
    EVENT_SUBSCRIBE,
    EVENT_UNSUBSCRIBE,
    TABLE_FUTURES_ACCOUNT,
    TABLE_FUTURES_ORDER,
    TABLE_FUTURES_POSITION,
    TABLE_FUTURES_TICKER,
    TABLE_FUTURES_TRADE,
)

# Table name → handler method name mapping. The order book table is
# matched before this lookup and is not listed here.
TABLE_HANDLERS: dict[str, str] = {
    TABLE_FUTURES_TICKER: "_handle_ticker",
    TABLE_FUTURES_TRADE: "_handle_trade",
    TABLE_FUTURES_ACCOUNT: "_handle_account",
    TABLE_FUTURES_POSITION: "_handle_position",
    TABLE_FUTURES_ORDER: "_handle_order",
}

# Event name → handler method name mapping
EVENT_HANDLERS: dict[str, str] = {
    EVENT_LOGIN: "_handle_login",
    EVENT_SUBSCRIBE: "_handle_subscribed",
    EVENT_UNSUBSCRIBE: "_handle_unsubscribed",
    EVENT_ERROR: "_handle_error",
}
