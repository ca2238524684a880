"""Frame inflation, envelope parsing and typed decoding of table messages.

OKEx v3 pushes every frame as raw DEFLATE. After inflating, a frame is a
JSON object that is either a table message::

    {"table": "futures/ticker", "data": [{...}, ...]}
    {"table": "futures/depth_l2_tbt", "action": "partial", "data": [{...}]}

or an event message::

    {"event": "login", "success": true}
    {"event": "subscribe", "channel": "futures/ticker:BTC-USD-200626"}
    {"event": "error", "message": "User not logged in", "errorCode": 30041}
"""

from __future__ import annotations

import zlib
from typing import Any, Protocol, TypeVar

import orjson
from pydantic import BaseModel, TypeAdapter, ValidationError

from okfutures.models import (
    ACCOUNT_CURRENCIES,
    DepthL2Tbt,
    DepthL2TbtResult,
    FuturesAccount,
    FuturesOrder,
    FuturesPosition,
    FuturesTicker,
    FuturesTrade,
)

# Table names
TABLE_FUTURES_TICKER = "futures/ticker"
TABLE_FUTURES_TRADE = "futures/trade"
TABLE_FUTURES_DEPTH_L2_TBT = "futures/depth_l2_tbt"  # 400-level tick-by-tick book
TABLE_FUTURES_POSITION = "futures/position"
TABLE_FUTURES_ACCOUNT = "futures/account"
TABLE_FUTURES_ORDER = "futures/order"

EVENT_LOGIN = "login"
EVENT_SUBSCRIBE = "subscribe"
EVENT_UNSUBSCRIBE = "unsubscribe"
EVENT_ERROR = "error"

ModelT = TypeVar("ModelT", bound=BaseModel)


class CodecError(ValueError):
    """Raised when a frame cannot be inflated, parsed or decoded."""


class Decompressor(Protocol):
    def inflate(self, data: bytes) -> bytes: ...


class FlateDecompressor:
    """Inflates raw DEFLATE payloads (no zlib header)."""

    def inflate(self, data: bytes | str) -> bytes:
        if isinstance(data, str):
            # Text frames arrive uncompressed.
            return data.encode()
        decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
        try:
            return decompressor.decompress(data) + decompressor.flush()
        except zlib.error as e:
            raise CodecError(f"inflate failed: {e}") from e


def channel(table: str, symbol: str) -> str:
    """Wire channel request string, e.g. 'futures/ticker:BTC-USD-200626'."""
    return f"{table}:{symbol}"


def parse_envelope(raw: bytes | str) -> dict[str, Any]:
    """Parse an inflated frame into its generic key-value envelope."""
    try:
        envelope = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise CodecError(f"invalid json: {e}") from e
    if not isinstance(envelope, dict):
        raise CodecError(f"expected a json object, got {type(envelope).__name__}")
    return envelope


def _data_rows(envelope: dict[str, Any]) -> list[Any]:
    data = envelope.get("data")
    if not isinstance(data, list):
        raise CodecError(f"table {envelope.get('table')!r} has no data array")
    return data


def _decode_rows(envelope: dict[str, Any], adapter: TypeAdapter[list[ModelT]]) -> list[ModelT]:
    try:
        return adapter.validate_python(_data_rows(envelope))
    except ValidationError as e:
        raise CodecError(f"table {envelope.get('table')!r} failed validation: {e}") from e


_TICKERS = TypeAdapter(list[FuturesTicker])
_TRADES = TypeAdapter(list[FuturesTrade])
_POSITIONS = TypeAdapter(list[FuturesPosition])
_ORDERS = TypeAdapter(list[FuturesOrder])


def decode_tickers(envelope: dict[str, Any]) -> list[FuturesTicker]:
    return _decode_rows(envelope, _TICKERS)


def decode_trades(envelope: dict[str, Any]) -> list[FuturesTrade]:
    return _decode_rows(envelope, _TRADES)


def decode_positions(envelope: dict[str, Any]) -> list[FuturesPosition]:
    return _decode_rows(envelope, _POSITIONS)


def decode_orders(envelope: dict[str, Any]) -> list[FuturesOrder]:
    return _decode_rows(envelope, _ORDERS)


def decode_depth_l2_tbt(envelope: dict[str, Any]) -> tuple[str, list[DepthL2Tbt]]:
    """Return (action, books); action is 'partial' or 'update'."""
    try:
        result = DepthL2TbtResult.model_validate(envelope)
    except ValidationError as e:
        raise CodecError(f"order book frame failed validation: {e}") from e
    return result.action, result.data


def first_populated(entry: dict[str, Any], keys: tuple[str, ...] = ACCOUNT_CURRENCIES) -> Any | None:
    """First non-empty value among mutually exclusive optional keys, in key order."""
    for key in keys:
        value = entry.get(key)
        # An empty balance object counts as absent, like a missing key.
        if value:
            return value
    return None


def decode_accounts(envelope: dict[str, Any]) -> list[FuturesAccount]:
    """Flatten {"BTC": {...}} style entries into a list of balances.

    Entries with no supported currency populated are skipped.
    """
    accounts: list[FuturesAccount] = []
    for entry in _data_rows(envelope):
        if not isinstance(entry, dict):
            raise CodecError(f"account entry is not an object: {entry!r}")
        balance = first_populated(entry)
        if balance is None:
            continue
        try:
            accounts.append(FuturesAccount.model_validate(balance))
        except ValidationError as e:
            raise CodecError(f"account balance failed validation: {e}") from e
    return accounts


def encode_op(op: str, args: list[str]) -> dict[str, Any]:
    """Outbound request body: {"op": ..., "args": [...]}."""
    return {"op": op, "args": list(args)}
