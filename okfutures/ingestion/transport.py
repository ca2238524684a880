"""Auto-reconnecting WebSocket transport with a post-connect hook.

Dialing, reconnection and backoff are delegated to the ``websockets``
library: iterating a ``connect`` object yields a fresh connection each time
the previous one is dropped, backing off on failed attempts.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any, Protocol
from urllib.parse import urlparse

import orjson
import structlog
import websockets
from websockets.asyncio.client import ClientConnection, connect

logger = structlog.get_logger(__name__)

PROXY_SCHEMES = ("socks5", "socks5h", "socks4", "socks4a", "http", "https")

ConnectHook = Callable[[], Awaitable[None]]


class TransportClosedError(ConnectionError):
    """The transport was closed locally; no further reads or writes."""


class TransportNotConnectedError(ConnectionError):
    """No live connection to write to."""


class Transport(Protocol):
    on_connect: ConnectHook | None

    @property
    def current_url(self) -> str: ...

    @property
    def is_connected(self) -> bool: ...

    def set_proxy(self, proxy_url: str) -> None: ...

    async def connect(self, url: str) -> None: ...

    async def read_frame(self) -> bytes | str: ...

    async def write_json(self, value: Any) -> None: ...

    async def close(self) -> None: ...


def validate_proxy_url(proxy_url: str) -> str:
    """Accept socks5://host:port or http(s)://host:port style proxy URLs."""
    parsed = urlparse(proxy_url)
    if parsed.scheme.lower() not in PROXY_SCHEMES:
        raise ValueError(f"unsupported proxy scheme in {proxy_url!r}")
    try:
        port = parsed.port
    except ValueError as e:
        raise ValueError(f"invalid proxy port in {proxy_url!r}") from e
    if not parsed.hostname or port is None:
        raise ValueError(f"proxy URL needs a host and port: {proxy_url!r}")
    return proxy_url


class WebSocketTransport:
    """Transport over ``websockets`` that reconnects on the next read.

    After every successful (re)connect the ``on_connect`` hook is awaited
    before the first frame is returned to the reader.
    """

    def __init__(
        self,
        *,
        ping_interval: float | None = 10,
        ping_timeout: float | None = 10,
        open_timeout: float | None = 10,
        max_size: int | None = 10 * 1024 * 1024,
    ) -> None:
        self._ping_interval = ping_interval
        self._ping_timeout = ping_timeout
        self._open_timeout = open_timeout
        self._max_size = max_size

        # True lets websockets read proxy settings from the environment.
        self._proxy: str | bool = True
        self._url = ""
        self._ws: ClientConnection | None = None
        self._connections: AsyncGenerator[ClientConnection, None] | None = None
        self._dialing = False
        self._closed = False

        self.on_connect: ConnectHook | None = None

    @property
    def current_url(self) -> str:
        return self._url

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    def set_proxy(self, proxy_url: str) -> None:
        self._proxy = validate_proxy_url(proxy_url)
        logger.info("websocket_proxy_set", proxy_url=proxy_url)

    async def connect(self, url: str) -> None:
        """Record the target; the first read dials it."""
        self._url = url
        self._closed = False
        logger.info("websocket_connecting", url=url)

    def _connector(self) -> connect:
        return connect(
            self._url,
            proxy=self._proxy,
            open_timeout=self._open_timeout,
            ping_interval=self._ping_interval,
            ping_timeout=self._ping_timeout,
            max_size=self._max_size,
        )

    async def _dial(self) -> None:
        if not self._url:
            raise TransportNotConnectedError("connect() has not been called")
        if self._connections is None:
            self._connections = aiter(self._connector())

        self._dialing = True
        try:
            ws = await anext(self._connections)
        except Exception:
            # Fatal dial errors end the iterator; start a fresh one next time.
            self._connections = None
            raise
        finally:
            self._dialing = False

        if self._closed:
            await ws.close()
            raise TransportClosedError("transport closed while dialing")

        self._ws = ws
        logger.info("websocket_connected", url=self._url)

        if self.on_connect is not None:
            await self.on_connect()

    async def read_frame(self) -> bytes | str:
        if self._closed:
            raise TransportClosedError("transport closed")
        if self._ws is None:
            await self._dial()
        ws = self._ws
        if ws is None:
            raise TransportClosedError("transport closed during connect hook")
        try:
            return await ws.recv()
        except websockets.ConnectionClosed:
            self._ws = None
            raise

    async def write_json(self, value: Any) -> None:
        if self._ws is None:
            raise TransportNotConnectedError(f"not connected to {self._url}")
        await self._ws.send(orjson.dumps(value).decode())

    async def close(self) -> None:
        self._closed = True
        ws, self._ws = self._ws, None
        if ws is not None:
            await ws.close()
        if self._connections is not None and not self._dialing:
            await self._connections.aclose()
        self._connections = None
        logger.info("websocket_closed", url=self._url)
