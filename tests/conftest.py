"""Shared test fixtures for the okfutures test suite."""

from __future__ import annotations

import asyncio
import zlib
from typing import Any

import orjson
import pytest

from okfutures.config import TuningConfig
from okfutures.ingestion.transport import (
    TransportClosedError,
    TransportNotConnectedError,
    validate_proxy_url,
)
from okfutures.ingestion.ws_client import FuturesWSManager


def deflate(msg: Any) -> bytes:
    """Compress a message the way the exchange does (raw DEFLATE)."""
    compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return compressor.compress(orjson.dumps(msg)) + compressor.flush()


class FakeTransport:
    """In-memory transport: frames are queued by the test, writes are recorded."""

    def __init__(self) -> None:
        self.on_connect = None
        self.sent: list[dict] = []
        self.frames: asyncio.Queue[Any] = asyncio.Queue()
        self.proxy: str | None = None
        self.url = ""
        self.connected = False
        self.closed = False
        self.fail_ops: set[str] = set()
        self.write_log: list[tuple[str, str]] = []

    @property
    def current_url(self) -> str:
        return self.url

    @property
    def is_connected(self) -> bool:
        return self.connected

    def set_proxy(self, proxy_url: str) -> None:
        self.proxy = validate_proxy_url(proxy_url)

    async def connect(self, url: str) -> None:
        self.url = url

    async def simulate_connect(self) -> None:
        """What the real transport does after each successful (re)connect."""
        self.connected = True
        if self.on_connect is not None:
            await self.on_connect()

    async def read_frame(self) -> bytes | str:
        if self.closed:
            raise TransportClosedError("closed")
        item = await self.frames.get()
        if isinstance(item, BaseException):
            raise item
        return item

    async def write_json(self, value: Any) -> None:
        if not self.connected:
            raise TransportNotConnectedError("not connected")
        if value["op"] in self.fail_ops:
            raise ConnectionError(f"write failed for {value['op']}")
        # Yield mid-write so unserialized writers would interleave.
        self.write_log.append(("begin", orjson.dumps(value).decode()))
        await asyncio.sleep(0)
        self.write_log.append(("end", orjson.dumps(value).decode()))
        self.sent.append(value)

    async def close(self) -> None:
        self.closed = True
        self.connected = False
        self.frames.put_nowait(TransportClosedError("closed"))

    def ops(self, op: str) -> list[dict]:
        return [m for m in self.sent if m["op"] == op]


@pytest.fixture
def fast_tuning() -> TuningConfig:
    return TuningConfig(WS_LOGIN_SETTLE_DELAY=0.0, WS_READ_RETRY_DELAY=0.0, WS_CLOSE_TIMEOUT=1.0)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def manager(transport: FakeTransport, fast_tuning: TuningConfig) -> FuturesWSManager:
    """A session with credentials and an in-memory transport."""
    return FuturesWSManager(
        "wss://real.okex.com:8443/ws/v3",
        access_key="ak-123",
        secret_key="sk-456",
        passphrase="pass-789",
        transport=transport,
        tuning=fast_tuning,
    )


@pytest.fixture
def anon_manager(transport: FakeTransport, fast_tuning: TuningConfig) -> FuturesWSManager:
    """A session without credentials."""
    return FuturesWSManager(
        "wss://real.okex.com:8443/ws/v3", transport=transport, tuning=fast_tuning
    )


@pytest.fixture
def sample_ticker_msg() -> dict:
    """Ticker table message as received from the futures WebSocket."""
    return {
        "table": "futures/ticker",
        "data": [
            {
                "last": "6768.28",
                "open_24h": "6887.16",
                "best_bid": "6765.49",
                "high_24h": "6889.64",
                "low_24h": "6711",
                "volume_24h": "4012676",
                "volume_token_24h": "59026.9171",
                "best_ask": "6765.5",
                "open_interest": "2789329",
                "instrument_id": "BTC-USD-200626",
                "timestamp": "2020-04-12T06:19:03.829Z",
                "best_bid_size": "129",
                "best_ask_size": "6",
                "last_qty": "2",
            },
            {
                "last": "158.27",
                "best_bid": "158.26",
                "best_ask": "158.27",
                "instrument_id": "ETH-USD-200626",
                "timestamp": "2020-04-12T06:19:03.901Z",
            },
        ],
    }


@pytest.fixture
def sample_trade_msg() -> dict:
    return {
        "table": "futures/trade",
        "data": [
            {
                "side": "buy",
                "trade_id": "5062468413747207",
                "price": "6768.28",
                "qty": "2",
                "instrument_id": "BTC-USD-200626",
                "timestamp": "2020-04-12T06:19:03.829Z",
            }
        ],
    }


@pytest.fixture
def sample_depth_partial_msg() -> dict:
    """Order book snapshot (trimmed to a few levels)."""
    return {
        "table": "futures/depth_l2_tbt",
        "action": "partial",
        "data": [
            {
                "instrument_id": "BTC-USD-200626",
                "asks": [
                    ["6773.41", "344", "0", "8"],
                    ["6773.8", "13", "0", "10"],
                    ["6773.81", "40", "0", "1"],
                ],
                "bids": [
                    ["6773.4", "29", "0", "4"],
                    ["6773.3", "3", "0", "1"],
                ],
                "timestamp": "2020-04-12T10:24:19.913Z",
                "checksum": 854586422,
            }
        ],
    }


@pytest.fixture
def sample_depth_update_msg() -> dict:
    """Order book delta: zero sizes mean the level is gone."""
    return {
        "table": "futures/depth_l2_tbt",
        "action": "update",
        "data": [
            {
                "instrument_id": "BTC-USD-200626",
                "asks": [["6772.8", "0", "0", "0"], ["6782.5", "11", "0", "1"]],
                "bids": [["6774.21", "0", "0", "0"]],
                "timestamp": "2020-04-12T10:24:19.938Z",
                "checksum": -1200119424,
            }
        ],
    }


@pytest.fixture
def sample_account_balance() -> dict:
    return {
        "available": "0.01867179",
        "can_withdraw": "0.01867179",
        "currency": "BTC",
        "equity": "0.02018113",
        "liqui_mode": "tier",
        "maint_margin_ratio": "0.005",
        "margin": "0.00150934",
        "margin_for_unfilled": "0",
        "margin_frozen": "0.00150934",
        "margin_mode": "crossed",
        "margin_ratio": "1.3370831",
        "open_max": "0",
        "realized_pnl": "-0.00034029",
        "timestamp": "2020-04-12T08:00:13.975Z",
        "total_avail_balance": "0.02046331",
        "underlying": "BTC-USD",
        "unrealized_pnl": "0.00005811",
    }


@pytest.fixture
def sample_account_msg(sample_account_balance: dict) -> dict:
    return {"table": "futures/account", "data": [{"BTC": sample_account_balance}]}


@pytest.fixture
def sample_position_msg() -> dict:
    return {
        "table": "futures/position",
        "data": [
            {
                "long_qty": "1",
                "long_avail_qty": "1",
                "long_avg_cost": "6765.5",
                "long_settlement_price": "6765.5",
                "realised_pnl": "-0.00000739",
                "short_qty": "0",
                "short_avail_qty": "0",
                "short_avg_cost": "0",
                "short_settlement_price": "0",
                "liquidation_price": "0",
                "instrument_id": "BTC-USD-200626",
                "leverage": "10",
                "created_at": "2020-04-12T06:19:03.829Z",
                "updated_at": "2020-04-12T06:19:03.829Z",
                "margin_mode": "crossed",
                "last": "6768.28",
            }
        ],
    }


@pytest.fixture
def sample_order_msg() -> dict:
    return {
        "table": "futures/order",
        "data": [
            {
                "leverage": "10",
                "last_fill_time": "1970-01-01T00:00:00.000Z",
                "filled_qty": "0",
                "fee": "0",
                "price_avg": "0",
                "type": "1",
                "client_oid": "",
                "last_fill_qty": "0",
                "instrument_id": "BTC-USD-200626",
                "last_fill_px": "0",
                "pnl": "0",
                "size": "1",
                "price": "6200",
                "last_fill_id": "0",
                "error_code": "0",
                "state": "0",
                "contract_val": "100",
                "order_id": "4718613348289537",
                "order_type": "0",
                "timestamp": "2020-04-13T00:05:25.760Z",
                "status": "0",
            }
        ],
    }
