"""Reconnecting WebSocket connection manager.

Owns:
- the connect / backoff / reconnect state machine
- parsing inbound frames into envelopes and handing them to the router
- lifecycle notifications (``connected`` / ``disconnected`` / ``error``)
- fire-and-forget outbound messages
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

import aiohttp
from pydantic import BaseModel, ConfigDict, ValidationError

from possync._constants import (
    CLIENT_DISCONNECT_REASON,
    CLOSE_ABNORMAL,
    CLOSE_NORMAL,
    CONTROL_PING,
    CONTROL_SUBSCRIBE,
    CONTROL_UNSUBSCRIBE,
    SERVER_ERROR,
    SERVER_WELCOME,
)
from possync._redact import redact_for_log
from possync.config import SyncConfig
from possync.exceptions import EnvelopeError
from possync.models.envelope import Envelope, LifecycleTopic, MessageType, parse_envelope
from possync.sync._transport import AiohttpConnector, Connector, TransportClose, TransportConnection
from possync.sync.router import EventRouter

_logger = logging.getLogger(__name__)

_DISPATCHABLE: frozenset[str] = frozenset(member.value for member in MessageType)
_SERVER_NOTICES: frozenset[str] = frozenset({SERVER_WELCOME, SERVER_ERROR})


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


class ConnectionStatus(BaseModel):
    """Point-in-time view returned by :meth:`ConnectionManager.get_status`."""

    model_config = ConfigDict(frozen=True)

    connected: bool
    reconnect_attempts: int
    state: ConnectionState


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before reconnect *attempt* (counted from 1): ``base * 2**(attempt-1)``."""
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    return base_delay * 2 ** (attempt - 1)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConnectionManager:
    """One logical persistent connection with exponential-backoff reconnects.

    State machine (initial ``disconnected``)::

        disconnected --connect()--> connecting
        connecting   --open-------> connected          (attempts reset to 0)
        connecting   --failure----> reconnecting | closed
        connected    --close 1000-> disconnected
        connected    --other close> reconnecting | closed
        reconnecting --timer------> connecting
        any          --disconnect()-> closed

    ``closed`` is reached after ``max_reconnect_attempts`` consecutive failures
    or an explicit :meth:`disconnect`; only a new :meth:`connect` leaves it.

    Usage::

        router = EventRouter()
        manager = ConnectionManager(router, SyncConfig(url="ws://pos:5000"))
        manager.connect()
        ...
        await manager.disconnect()
    """

    def __init__(
        self,
        router: EventRouter,
        config: SyncConfig | None = None,
        *,
        connector: Connector | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._router = router
        self._config = config or SyncConfig()
        self._connector = connector
        self._sleep = sleep
        self._clock = clock
        self._url = self._config.url

        self._state = ConnectionState.DISCONNECTED
        self._reconnect_attempts = 0
        self._connection: TransportConnection | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopping = False
        self._owned_session: aiohttp.ClientSession | None = None
        self._pending_sends: set[asyncio.Task[None]] = set()
        self._state_waiters: list[asyncio.Future[None]] = []

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def url(self) -> str:
        return self._url

    def get_status(self) -> ConnectionStatus:
        """Current connection status. Pure read."""
        return ConnectionStatus(
            connected=self._state == ConnectionState.CONNECTED,
            reconnect_attempts=self._reconnect_attempts,
            state=self._state,
        )

    async def wait_for_state(self, *states: ConnectionState, timeout: float) -> bool:
        """Wait until the state is one of *states*. Returns ``False`` on timeout."""
        loop = asyncio.get_running_loop()
        try:
            async with asyncio.timeout(timeout):
                while self._state not in states:
                    waiter: asyncio.Future[None] = loop.create_future()
                    self._state_waiters.append(waiter)
                    await waiter
        except TimeoutError:
            return False
        return True

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        _logger.debug("Connection state %s -> %s", self._state, state)
        self._state = state
        waiters, self._state_waiters = self._state_waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self, url: str | None = None) -> None:
        """Start connecting in the background.

        No-op while ``connecting`` or ``connected``. From ``reconnecting`` the
        pending backoff is cancelled and a connect attempt starts at once; the
        attempt count is kept. From ``closed`` the attempt count restarts.
        Must be called with a running event loop.
        """
        if self._state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
            _logger.debug("connect() ignored, state=%s", self._state)
            return

        loop = asyncio.get_running_loop()
        if url is not None:
            self._url = url

        if self._task is not None:
            # Only a backoff sleep can be pending here.
            self._task.cancel()
            self._task = None
        if self._state == ConnectionState.CLOSED:
            self._reconnect_attempts = 0

        self._stopping = False
        self._set_state(ConnectionState.CONNECTING)
        self._task = loop.create_task(self._run(self._url), name=f"possync-connection:{self._url}")

    async def disconnect(self) -> None:
        """Cancel any pending reconnect, close with code 1000 and move to ``closed``.

        Idempotent.
        """
        task, self._task = self._task, None
        connection, self._connection = self._connection, None
        was_connected = self._state == ConnectionState.CONNECTED
        self._stopping = True
        self._set_state(ConnectionState.CLOSED)

        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if connection is not None:
            try:
                await connection.close(CLOSE_NORMAL, CLIENT_DISCONNECT_REASON)
            except Exception:
                _logger.debug("Transport close failed", exc_info=True)

        session, self._owned_session = self._owned_session, None
        if session is not None:
            await session.close()

        if was_connected:
            _logger.info("Disconnected from %s", self._url)
            self._emit(
                LifecycleTopic.DISCONNECTED,
                {"code": CLOSE_NORMAL, "reason": CLIENT_DISCONNECT_REASON, "was_clean": True},
            )

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def send(self, type: str, payload: dict[str, Any] | None = None) -> bool:
        """Send one envelope, fire-and-forget.

        Returns ``False`` (and logs a warning) when not connected or when the
        type is empty. Nothing is queued or retried.
        """
        connection = self._connection
        if self._state != ConnectionState.CONNECTED or connection is None:
            _logger.warning("Not connected, message not sent: type=%s", type)
            return False

        try:
            envelope = Envelope(type=type, payload=payload or {}, timestamp=self._clock())
        except ValidationError as exc:
            _logger.warning("Invalid outbound message, not sent: type=%r errors=%d", type, exc.error_count())
            return False
        task = asyncio.get_running_loop().create_task(self._write(connection, envelope))
        self._pending_sends.add(task)
        task.add_done_callback(self._pending_sends.discard)
        return True

    def ping(self) -> bool:
        return self.send(CONTROL_PING)

    def request_topics(self, events: Iterable[str]) -> bool:
        """Ask the server to include *events* in what it pushes to this client."""
        return self.send(CONTROL_SUBSCRIBE, {"events": list(events)})

    def release_topics(self, events: Iterable[str]) -> bool:
        return self.send(CONTROL_UNSUBSCRIBE, {"events": list(events)})

    async def _write(self, connection: TransportConnection, envelope: Envelope) -> None:
        try:
            await connection.send(envelope.to_wire())
        except Exception as exc:
            _logger.warning("Send failed, message dropped: type=%s error=%s", envelope.type, exc)
            return
        _logger.debug("Sent type=%s payload=%s", envelope.type, redact_for_log(envelope.payload))

    # ------------------------------------------------------------------
    # Supervisor
    # ------------------------------------------------------------------

    async def _open(self, url: str) -> TransportConnection:
        connector = self._connector
        if connector is None:
            if self._owned_session is None or self._owned_session.closed:
                self._owned_session = aiohttp.ClientSession()
            connector = AiohttpConnector(self._owned_session, self._config)
        return await connector(url)

    async def _run(self, url: str) -> None:
        while True:
            self._set_state(ConnectionState.CONNECTING)
            _logger.debug("Connecting to %s (attempt %d)", url, self._reconnect_attempts)
            try:
                connection = await self._open(url)
            except Exception as exc:
                _logger.warning("Connection to %s failed: %s", url, exc)
                self._emit(LifecycleTopic.ERROR, {"message": str(exc), "url": url, "fatal": False})
                if not await self._reconnect_after_failure():
                    return
                continue

            self._connection = connection
            self._reconnect_attempts = 0
            self._set_state(ConnectionState.CONNECTED)
            _logger.info("Connected to %s", url)
            self._emit(LifecycleTopic.CONNECTED, {"url": url})
            if self._config.topics:
                self.request_topics(self._config.topics)

            close = await self._read_loop(connection)
            self._connection = None
            if self._stopping:
                return

            _logger.info(
                "Connection closed code=%s reason=%s clean=%s",
                close.code,
                close.reason,
                close.was_clean,
            )
            if close.is_normal:
                self._set_state(ConnectionState.DISCONNECTED)
                self._task = None
                self._emit(LifecycleTopic.DISCONNECTED, self._close_payload(close))
                return

            delay = self._next_backoff()
            if delay is None:
                # The fatal error precedes ``disconnected``.
                self._emit_exhausted(self._reconnect_attempts)
                self._emit(LifecycleTopic.DISCONNECTED, self._close_payload(close))
                return
            self._emit(LifecycleTopic.DISCONNECTED, self._close_payload(close))
            await self._sleep(delay)

    async def _reconnect_after_failure(self) -> bool:
        delay = self._next_backoff()
        if delay is None:
            self._emit_exhausted(self._reconnect_attempts)
            return False
        await self._sleep(delay)
        return True

    def _next_backoff(self) -> float | None:
        """Advance the attempt counter and return the delay, or move to ``closed``."""
        if self._reconnect_attempts >= self._config.max_reconnect_attempts:
            self._set_state(ConnectionState.CLOSED)
            self._task = None
            _logger.error(
                "Max reconnection attempts reached (%d); call connect() to retry",
                self._config.max_reconnect_attempts,
            )
            return None

        self._reconnect_attempts += 1
        delay = backoff_delay(self._reconnect_attempts, self._config.reconnect_delay)
        self._set_state(ConnectionState.RECONNECTING)
        _logger.info(
            "Reconnecting in %.2fs (attempt %d/%d)",
            delay,
            self._reconnect_attempts,
            self._config.max_reconnect_attempts,
        )
        return delay

    async def _read_loop(self, connection: TransportConnection) -> TransportClose:
        while True:
            try:
                frame = await connection.recv()
            except Exception as exc:
                _logger.warning("Receive failed: %s", exc)
                self._emit(LifecycleTopic.ERROR, {"message": str(exc), "url": self._url, "fatal": False})
                return TransportClose(code=CLOSE_ABNORMAL, reason=str(exc), was_clean=False)

            if isinstance(frame, TransportClose):
                return frame
            self._handle_frame(frame)
            if self._stopping:
                return TransportClose(code=CLOSE_NORMAL, reason=CLIENT_DISCONNECT_REASON, was_clean=True)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def _handle_frame(self, raw: str) -> None:
        try:
            envelope = parse_envelope(raw)
        except EnvelopeError as exc:
            _logger.warning("Dropping malformed frame: %s", exc)
            return

        if envelope.type in _SERVER_NOTICES:
            if envelope.type == SERVER_ERROR:
                _logger.warning("Server reported error: %s", redact_for_log(envelope.payload))
            else:
                _logger.debug("Server notice type=%s", envelope.type)
            return

        if envelope.type not in _DISPATCHABLE:
            _logger.info("Ignoring unknown message type=%s", envelope.type)
            return

        _logger.debug("Received type=%s payload=%s", envelope.type, redact_for_log(envelope.payload))
        self._router.dispatch(envelope)

    def _emit(self, topic: LifecycleTopic, payload: dict[str, Any]) -> None:
        self._router.dispatch(Envelope(type=topic.value, payload=payload, timestamp=self._clock()))

    def _emit_exhausted(self, attempts: int) -> None:
        self._emit(
            LifecycleTopic.ERROR,
            {
                "message": "Max reconnection attempts reached",
                "url": self._url,
                "attempts": attempts,
                "fatal": True,
            },
        )

    @staticmethod
    def _close_payload(close: TransportClose) -> dict[str, Any]:
        return {"code": close.code, "reason": close.reason, "was_clean": close.was_clean}
