"""WebSocket transport: a small connection protocol and its aiohttp implementation."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

import aiohttp

from possync._constants import CLOSE_ABNORMAL, CLOSE_NORMAL
from possync.config import SyncConfig
from possync.exceptions import PosSyncTransportError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportClose:
    """How a connection ended."""

    code: int | None
    reason: str = ""
    was_clean: bool = False

    @property
    def is_normal(self) -> bool:
        """A clean ``1000`` close: the peer meant to hang up."""
        return self.was_clean and self.code == CLOSE_NORMAL


class TransportConnection(Protocol):
    """Structural interface for one open WebSocket.

    Keeping this a protocol lets tests drive the connection manager with
    in-memory fakes.
    """

    async def recv(self) -> str | TransportClose: ...

    async def send(self, text: str) -> None: ...

    async def close(self, code: int = CLOSE_NORMAL, reason: str = "") -> None: ...


class Connector(Protocol):
    async def __call__(self, url: str) -> TransportConnection: ...


class AiohttpConnection:
    """:class:`TransportConnection` over an ``aiohttp`` client WebSocket."""

    def __init__(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        self._ws = ws

    async def recv(self) -> str | TransportClose:
        while True:
            msg = await self._ws.receive()
            if msg.type == aiohttp.WSMsgType.TEXT:
                return str(msg.data)
            if msg.type == aiohttp.WSMsgType.BINARY:
                try:
                    return bytes(msg.data).decode("utf-8")
                except UnicodeDecodeError:
                    _logger.debug("Dropping non UTF-8 binary frame (%d bytes)", len(msg.data))
                    continue
            if msg.type == aiohttp.WSMsgType.CLOSE:
                # Peer sent a close frame: a clean closing handshake.
                return TransportClose(code=msg.data, reason=str(msg.extra or ""), was_clean=True)
            if msg.type in (aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED):
                return TransportClose(code=self._ws.close_code or CLOSE_ABNORMAL, was_clean=False)
            if msg.type == aiohttp.WSMsgType.ERROR:
                _logger.debug("WebSocket error frame: %s", self._ws.exception())
                return TransportClose(
                    code=self._ws.close_code or CLOSE_ABNORMAL,
                    reason=str(self._ws.exception() or ""),
                    was_clean=False,
                )
            # PING/PONG are handled by aiohttp (autoping); anything else is ignored.

    async def send(self, text: str) -> None:
        try:
            await self._ws.send_str(text)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as exc:
            raise PosSyncTransportError(f"send failed: {exc}") from exc

    async def close(self, code: int = CLOSE_NORMAL, reason: str = "") -> None:
        if self._ws.closed:
            return
        await self._ws.close(code=code, message=reason.encode("utf-8"))


class AiohttpConnector:
    """Open WebSocket connections on an ``aiohttp.ClientSession``.

    The session is borrowed: whoever created it closes it.
    """

    def __init__(self, session: aiohttp.ClientSession, config: SyncConfig) -> None:
        self._session = session
        self._config = config

    async def __call__(self, url: str) -> TransportConnection:
        try:
            async with asyncio.timeout(self._config.connect_timeout):
                ws = await self._session.ws_connect(url, heartbeat=self._config.heartbeat)
        except (aiohttp.ClientError, OSError, TimeoutError) as exc:
            raise PosSyncTransportError(f"connect failed: {exc}", url=url) from exc
        _logger.debug("WebSocket handshake complete url=%s", url)
        return AiohttpConnection(ws)
