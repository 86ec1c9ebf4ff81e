"""High-level async client for POS realtime synchronization."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from possync.config import SyncConfig
from possync.models.envelope import LifecycleTopic
from possync.state.bindings import bind_store
from possync.state.store import StateStore
from possync.sync._transport import AiohttpConnector, Connector
from possync.sync.connection import ConnectionManager, ConnectionState, ConnectionStatus
from possync.sync.router import EventRouter, Subscription

_logger = logging.getLogger(__name__)


class PosSyncClient:
    """Router, connection manager and state store wired together.

    Usage::

        async with PosSyncClient(SyncConfig.from_env()) as client:
            client.subscribe("order:completed", on_order)
            await client.wait_connected(timeout=5)
            print(client.store.dashboard.average_order_value)

    Each instance owns its own connection; nothing is shared between clients.
    """

    def __init__(
        self,
        config: SyncConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        connector: Connector | None = None,
        store: StateStore | None = None,
        on_connection_change: Callable[[ConnectionStatus], None] | None = None,
    ) -> None:
        self._config = config or SyncConfig()
        self._external_session = session is not None
        self._http_session = session
        self._connector = connector
        self._on_connection_change = on_connection_change

        self.router = EventRouter()
        self.store = store or StateStore()
        self._store_subscriptions = bind_store(self.router, self.store)
        self._lifecycle_subscriptions: list[Subscription] = []
        self.connection: ConnectionManager | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PosSyncClient:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def start(self) -> None:
        """Create the connection manager (and session if needed) and connect."""
        if self.connection is None:
            connector = self._connector
            if connector is None:
                if self._http_session is None:
                    self._http_session = aiohttp.ClientSession()
                connector = AiohttpConnector(self._http_session, self._config)
            self.connection = ConnectionManager(self.router, self._config, connector=connector)
            if self._on_connection_change is not None:
                self._lifecycle_subscriptions = [
                    self.router.subscribe(topic, self._lifecycle_changed) for topic in LifecycleTopic
                ]
        self.connection.connect()

    async def close(self) -> None:
        if self.connection is not None:
            await self.connection.disconnect()
        for subscription in self._lifecycle_subscriptions:
            subscription.cancel()
        self._lifecycle_subscriptions = []
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _lifecycle_changed(self, _payload: dict[str, Any]) -> None:
        if self._on_connection_change is not None:
            self._on_connection_change(self.get_status())

    # ------------------------------------------------------------------
    # Delegation
    # ------------------------------------------------------------------

    def subscribe(self, type: str, callback: Callable[[dict[str, Any]], None]) -> Subscription:
        return self.router.subscribe(type, callback)

    def unsubscribe(self, subscription: Subscription) -> bool:
        return self.router.unsubscribe(subscription)

    def send(self, type: str, payload: dict[str, Any] | None = None) -> bool:
        if self.connection is None:
            _logger.warning("Client not started, message not sent: type=%s", type)
            return False
        return self.connection.send(type, payload)

    def get_status(self) -> ConnectionStatus:
        if self.connection is None:
            return ConnectionStatus(connected=False, reconnect_attempts=0, state=ConnectionState.DISCONNECTED)
        return self.connection.get_status()

    async def wait_connected(self, timeout: float) -> bool:
        if self.connection is None:
            return False
        return await self.connection.wait_for_state(ConnectionState.CONNECTED, timeout=timeout)
