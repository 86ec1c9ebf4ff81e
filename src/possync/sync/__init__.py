"""Realtime sync layer: transport, connection state machine and event routing."""

from possync.sync._transport import AiohttpConnector, TransportClose, TransportConnection
from possync.sync.connection import ConnectionManager, ConnectionState, ConnectionStatus, backoff_delay
from possync.sync.router import EventRouter, Subscription

__all__ = [
    "AiohttpConnector",
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    "EventRouter",
    "Subscription",
    "TransportClose",
    "TransportConnection",
    "backoff_delay",
]
