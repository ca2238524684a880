"""OKEx v3 futures WebSocket session.

Keeps the set of wanted subscriptions, logs in and replays them after every
(re)connect, and turns inbound frames into typed callbacks.

Callbacks run inline on the reader task, one at most per frame. A slow
callback delays every frame behind it; hand work off to a queue if that
matters. Callbacks are meant to be set before ``start()`` and are read
without the session lock.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import structlog

from okfutures.config import AppConfig, TuningConfig
from okfutures.ingestion.codec import (
    TABLE_FUTURES_ACCOUNT,
    TABLE_FUTURES_DEPTH_L2_TBT,
    TABLE_FUTURES_ORDER,
    TABLE_FUTURES_POSITION,
    TABLE_FUTURES_TICKER,
    TABLE_FUTURES_TRADE,
    CodecError,
    Decompressor,
    FlateDecompressor,
    channel,
    decode_accounts,
    decode_depth_l2_tbt,
    decode_orders,
    decode_positions,
    decode_tickers,
    decode_trades,
    encode_op,
    parse_envelope,
)
from okfutures.ingestion.subscriptions import SubscriptionRegistry
from okfutures.ingestion.transport import Transport, WebSocketTransport
from okfutures.ingestion.ws_auth import HmacSha256Signer, Signer, login_args
from okfutures.ingestion.ws_router import EVENT_HANDLERS, TABLE_HANDLERS
from okfutures.models import (
    DepthL2Tbt,
    FuturesAccount,
    FuturesOrder,
    FuturesPosition,
    FuturesTicker,
    FuturesTrade,
)

logger = structlog.get_logger(__name__)

OP_LOGIN = "login"
OP_SUBSCRIBE = "subscribe"
OP_UNSUBSCRIBE = "unsubscribe"

STATS_INTERVAL_SECONDS = 60

TickerCallback = Callable[[list[FuturesTicker]], Awaitable[None] | None]
TradeCallback = Callable[[list[FuturesTrade]], Awaitable[None] | None]
DepthL2TbtCallback = Callable[[str, list[DepthL2Tbt]], Awaitable[None] | None]
AccountCallback = Callable[[list[FuturesAccount]], Awaitable[None] | None]
PositionCallback = Callable[[list[FuturesPosition]], Awaitable[None] | None]
OrderCallback = Callable[[list[FuturesOrder]], Awaitable[None] | None]


class SessionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    READING = "reading"
    CLOSING = "closing"
    CLOSED = "closed"


class FuturesWSManager:
    """
    Manages a streaming session against the OKEx v3 futures WebSocket.

    Handles login, subscription bookkeeping and replay, frame inflation,
    table classification and typed dispatch to per-table callbacks.
    Reconnection is left to the transport, which calls back into the
    session after every successful (re)connect.
    """

    def __init__(
        self,
        ws_url: str,
        access_key: str = "",
        secret_key: str = "",
        passphrase: str = "",
        *,
        transport: Transport | None = None,
        signer: Signer | None = None,
        decompressor: Decompressor | None = None,
        tuning: TuningConfig | None = None,
    ) -> None:
        credentials = (access_key, secret_key, passphrase)
        if any(credentials) and not all(credentials):
            raise ValueError("access_key, secret_key and passphrase must be given together")

        self._ws_url = ws_url
        self._access_key = access_key
        self._secret_key = secret_key
        self._passphrase = passphrase
        self._tuning = tuning or TuningConfig()

        self._transport: Transport = transport or WebSocketTransport(
            ping_interval=self._tuning.ws_ping_interval,
            ping_timeout=self._tuning.ws_pong_timeout,
            open_timeout=self._tuning.ws_open_timeout,
            max_size=self._tuning.ws_max_size,
        )
        self._transport.on_connect = self._on_connect
        self._signer: Signer = signer or HmacSha256Signer()
        self._decompressor: Decompressor = decompressor or FlateDecompressor()

        # Guards registry mutation and outbound sends together.
        self._lock = asyncio.Lock()
        self._closing = asyncio.Event()
        self._reader_task: asyncio.Task[None] | None = None
        self._awaiting_login_ack = False

        self.registry = SubscriptionRegistry()
        self.state = SessionState.IDLE

        self._ticker_callback: TickerCallback | None = None
        self._trade_callback: TradeCallback | None = None
        self._depth_l2_tbt_callback: DepthL2TbtCallback | None = None
        self._account_callback: AccountCallback | None = None
        self._position_callback: PositionCallback | None = None
        self._order_callback: OrderCallback | None = None

        # Stats
        self._msg_counts: dict[str, int] = {}
        self._last_stats_time: float = 0

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: Any) -> FuturesWSManager:
        """Build a session from environment configuration."""
        manager = cls(
            config.okex.ws_url,
            config.okex.access_key,
            config.okex.secret_key,
            config.okex.passphrase,
            tuning=config.tuning,
            **kwargs,
        )
        if config.okex.proxy_url:
            manager.set_proxy(config.okex.proxy_url)
        return manager

    @property
    def has_credentials(self) -> bool:
        return bool(self._access_key and self._secret_key and self._passphrase)

    @property
    def is_connected(self) -> bool:
        return self._transport.is_connected

    def set_proxy(self, proxy_url: str) -> None:
        """Route the connection through a proxy.

        proxy_url examples: socks5://127.0.0.1:1080, https://127.0.0.1:1080
        """
        self._transport.set_proxy(proxy_url)

    # ── Callbacks ─────────────────────────────────────────────────────

    def set_ticker_callback(self, callback: TickerCallback | None) -> None:
        self._ticker_callback = callback

    def set_trade_callback(self, callback: TradeCallback | None) -> None:
        self._trade_callback = callback

    def set_depth_l2_tbt_callback(self, callback: DepthL2TbtCallback | None) -> None:
        """callback(action, books); action is 'partial' or 'update'."""
        self._depth_l2_tbt_callback = callback

    def set_account_callback(self, callback: AccountCallback | None) -> None:
        self._account_callback = callback

    def set_position_callback(self, callback: PositionCallback | None) -> None:
        self._position_callback = callback

    def set_order_callback(self, callback: OrderCallback | None) -> None:
        self._order_callback = callback

    # ── Connection lifecycle ──────────────────────────────────────────

    async def start(self) -> asyncio.Task[None]:
        """Begin connecting and launch the reader task."""
        if self._reader_task is not None and not self._reader_task.done():
            return self._reader_task

        self._closing.clear()
        self.state = SessionState.CONNECTING
        await self._transport.connect(self._ws_url)
        self._last_stats_time = time.time()
        self._reader_task = asyncio.create_task(self._message_loop(), name="okfutures-reader")
        return self._reader_task

    async def close(self) -> None:
        """Signal the reader to stop, close the transport and wait for the reader."""
        self._closing.set()
        self.state = SessionState.CLOSING
        await self._transport.close()

        task, self._reader_task = self._reader_task, None
        if task is not None and task is not asyncio.current_task():
            try:
                await asyncio.wait_for(task, timeout=self._tuning.close_timeout)
            except asyncio.TimeoutError:
                logger.warning("reader_cancelled_on_close", timeout=self._tuning.close_timeout)
        self.state = SessionState.CLOSED

    async def __aenter__(self) -> FuturesWSManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _on_connect(self) -> None:
        """Handshake run by the transport after every (re)connect."""
        async with self._lock:
            self._awaiting_login_ack = False

            if not self.has_credentials:
                logger.info("login_skipped", reason="no_credentials")
            else:
                try:
                    await self._login()
                except Exception:
                    logger.exception("login_failed", url=self._transport.current_url)
                    return

                if self._tuning.replay_after_login_ack:
                    self._awaiting_login_ack = True
                    logger.info("resubscribe_deferred", subscriptions=len(self.registry))
                    return

            await self._resubscribe_all()

    async def _login(self) -> None:
        """Send the login op, then pause briefly so the server can set up the session.

        The login ack is not awaited here.
        """
        args = login_args(self._signer, self._access_key, self._secret_key, self._passphrase)
        await self._send_op(OP_LOGIN, args)
        logger.info("login_sent", timestamp=args[2])
        await asyncio.sleep(self._tuning.login_settle_delay)

    async def _resubscribe_all(self) -> None:
        """Replay every registered subscription. Caller holds the lock."""
        entries = self.registry.snapshot()
        if not entries:
            return

        logger.info("resubscribing", count=len(entries))
        for channels in entries:
            try:
                await self._send_op(OP_SUBSCRIBE, channels)
            except Exception:
                logger.exception("resubscribe_failed", channels=channels)

    # ── Subscription management ───────────────────────────────────────

    async def subscribe(self, key: str, channels: list[str]) -> None:
        """Register channels under key and send the subscribe op if connected.

        Re-using a key replaces its channels. A send failure is raised; the
        registration stays and is replayed on the next reconnect.
        """
        if not channels:
            raise ValueError("channels must not be empty")

        async with self._lock:
            self.registry.register(key, channels)
            if self._transport.is_connected:
                await self._send_op(OP_SUBSCRIBE, channels)

        logger.info("subscription_added", key=key, channels=channels)

    async def subscribe_ticker(self, key: str, symbol: str) -> None:
        await self.subscribe(key, [channel(TABLE_FUTURES_TICKER, symbol)])

    async def subscribe_trade(self, key: str, symbol: str) -> None:
        await self.subscribe(key, [channel(TABLE_FUTURES_TRADE, symbol)])

    async def subscribe_depth_l2_tbt(self, key: str, symbol: str) -> None:
        """400-level book: a full 'partial' first, then 'update' messages with changed levels."""
        await self.subscribe(key, [channel(TABLE_FUTURES_DEPTH_L2_TBT, symbol)])

    async def subscribe_position(self, key: str, symbol: str) -> None:
        await self.subscribe(key, [channel(TABLE_FUTURES_POSITION, symbol)])

    async def subscribe_account(self, key: str, symbol: str) -> None:
        """symbol is the underlying, e.g. 'BTC-USD'."""
        await self.subscribe(key, [channel(TABLE_FUTURES_ACCOUNT, symbol)])

    async def subscribe_order(self, key: str, symbol: str) -> None:
        await self.subscribe(key, [channel(TABLE_FUTURES_ORDER, symbol)])

    async def unsubscribe(self, key: str) -> None:
        """Forget key and send the unsubscribe op if connected. Never raises."""
        async with self._lock:
            channels = self.registry.unregister(key)
            if channels is None:
                logger.debug("unsubscribe_unknown_key", key=key)
                return

            if self._transport.is_connected:
                try:
                    await self._send_op(OP_UNSUBSCRIBE, list(channels))
                except Exception:
                    logger.exception("unsubscribe_send_failed", key=key)

        logger.info("unsubscribed", key=key, channels=list(channels))

    async def _send_op(self, op: str, args: list[str]) -> None:
        await self._transport.write_json(encode_op(op, args))

    # ── Message processing ────────────────────────────────────────────

    async def _message_loop(self) -> None:
        """Read, inflate and dispatch frames until close() is called."""
        while not self._closing.is_set():
            self.state = (
                SessionState.READING if self._transport.is_connected else SessionState.CONNECTING
            )
            try:
                raw = await self._transport.read_frame()
            except Exception as e:
                if self._closing.is_set():
                    break
                logger.warning("ws_read_error", error=repr(e), url=self._transport.current_url)
                await asyncio.sleep(self._tuning.read_retry_delay)
                continue

            try:
                msg = self._decompressor.inflate(raw)
            except CodecError as e:
                logger.error("inflate_error", error=str(e))
                continue

            await self._handle_message(msg)

            now = time.time()
            if now - self._last_stats_time >= STATS_INTERVAL_SECONDS:
                self._log_stats()
                self._last_stats_time = now

        self.state = SessionState.CLOSING
        await self._transport.close()
        self.state = SessionState.CLOSED
        logger.info("websocket_session_closed", url=self._transport.current_url)

    async def _handle_message(self, msg: bytes) -> None:
        """Classify one inflated frame and run at most one handler for it."""
        try:
            envelope = parse_envelope(msg)
        except CodecError as e:
            logger.error("invalid_frame", error=str(e), raw=msg[:200])
            return

        table = envelope.get("table")
        if table is not None:
            if not isinstance(table, str):
                logger.error("invalid_frame", error="table is not a string", raw=msg[:200])
                return
            self._msg_counts[table] = self._msg_counts.get(table, 0) + 1

            # The order book is by far the busiest table, so test it first.
            if table == TABLE_FUTURES_DEPTH_L2_TBT:
                await self._handle_depth_l2_tbt(envelope)
                return

            handler_name = TABLE_HANDLERS.get(table)
            if handler_name is None:
                logger.warning("unknown_table", table=table, raw=msg[:200])
                return
            await getattr(self, handler_name)(envelope)
            return

        event_name = envelope.get("event")
        if event_name is not None:
            if not isinstance(event_name, str):
                logger.error("invalid_frame", error="event is not a string", raw=msg[:200])
                return
            handler_name = EVENT_HANDLERS.get(event_name)
            if handler_name is None:
                logger.info("ws_event", event_name=event_name, msg=envelope)
                return
            await getattr(self, handler_name)(envelope)
            return

        logger.warning("unclassified_frame", raw=msg[:200])

    def _log_stats(self) -> None:
        """Log per-table message counts since the last report."""
        logger.info(
            "ws_stats",
            total_messages=sum(self._msg_counts.values()),
            by_table=dict(self._msg_counts),
            subscriptions=len(self.registry),
        )
        self._msg_counts.clear()

    async def _invoke(self, callback: Callable[..., Any] | None, table: str, *args: Any) -> None:
        if callback is None:
            logger.debug("no_callback_registered", table=table)
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("callback_error", table=table)

    # ── Table handlers ────────────────────────────────────────────────

    async def _handle_depth_l2_tbt(self, envelope: dict) -> None:
        try:
            action, books = decode_depth_l2_tbt(envelope)
        except CodecError as e:
            logger.error("depth_l2_tbt_parse_error", error=str(e))
            return
        await self._invoke(self._depth_l2_tbt_callback, TABLE_FUTURES_DEPTH_L2_TBT, action, books)

    async def _handle_ticker(self, envelope: dict) -> None:
        try:
            tickers = decode_tickers(envelope)
        except CodecError as e:
            logger.error("ticker_parse_error", error=str(e))
            return
        await self._invoke(self._ticker_callback, TABLE_FUTURES_TICKER, tickers)

    async def _handle_trade(self, envelope: dict) -> None:
        try:
            trades = decode_trades(envelope)
        except CodecError as e:
            logger.error("trade_parse_error", error=str(e))
            return
        await self._invoke(self._trade_callback, TABLE_FUTURES_TRADE, trades)

    async def _handle_account(self, envelope: dict) -> None:
        try:
            accounts = decode_accounts(envelope)
        except CodecError as e:
            logger.error("account_parse_error", error=str(e))
            return
        await self._invoke(self._account_callback, TABLE_FUTURES_ACCOUNT, accounts)

    async def _handle_position(self, envelope: dict) -> None:
        try:
            positions = decode_positions(envelope)
        except CodecError as e:
            logger.error("position_parse_error", error=str(e))
            return
        await self._invoke(self._position_callback, TABLE_FUTURES_POSITION, positions)

    async def _handle_order(self, envelope: dict) -> None:
        try:
            orders = decode_orders(envelope)
        except CodecError as e:
            logger.error("order_parse_error", error=str(e))
            return
        await self._invoke(self._order_callback, TABLE_FUTURES_ORDER, orders)

    # ── Event handlers ────────────────────────────────────────────────

    async def _handle_login(self, envelope: dict) -> None:
        """Handle the login ack; replays subscriptions if that was deferred."""
        if not envelope.get("success"):
            logger.error("login_rejected", msg=envelope)
            return

        logger.info("login_confirmed")
        if self._awaiting_login_ack:
            async with self._lock:
                self._awaiting_login_ack = False
                await self._resubscribe_all()

    async def _handle_subscribed(self, envelope: dict) -> None:
        logger.info("subscription_confirmed", channel=envelope.get("channel"))

    async def _handle_unsubscribed(self, envelope: dict) -> None:
        logger.info("unsubscription_confirmed", channel=envelope.get("channel"))

    async def _handle_error(self, envelope: dict) -> None:
        """Handle error messages from the server."""
        logger.error(
            "ws_server_error",
            error_code=envelope.get("errorCode"),
            message=envelope.get("message"),
        )
