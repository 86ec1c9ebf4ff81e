"""Client configuration for possync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from possync._constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HEARTBEAT,
    DEFAULT_MAX_RECONNECT_ATTEMPTS,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_URL,
)
from possync.exceptions import PosSyncConfigError


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise PosSyncConfigError(f"{name} must be a number, got {value!r}") from exc


def _env_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise PosSyncConfigError(f"{name} must be an integer, got {value!r}") from exc


def _env_heartbeat(value: str) -> float | None:
    normalized = value.strip().lower()
    if normalized in {"", "0", "off", "false", "no", "none"}:
        return None
    return _env_float("POS_SYNC_HEARTBEAT", normalized)


def _env_topics(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclasses.dataclass(frozen=True)
class SyncConfig:
    """Realtime synchronization settings.

    Parameters
    ----------
    url : str
        WebSocket URL of the POS server.
    reconnect_delay : float
        Base backoff delay in seconds. Attempt *n* waits
        ``reconnect_delay * 2 ** (n - 1)``.
    max_reconnect_attempts : int
        Consecutive failed attempts after which the connection manager gives
        up and moves to ``closed``.
    heartbeat : float or None
        WebSocket ping interval in seconds. ``None`` disables pings.
    connect_timeout : float
        Seconds to wait for the WebSocket handshake.
    topics : tuple of str
        Server-side topics requested after every successful connect. Empty
        means the server's default (everything).
    """

    url: str = DEFAULT_URL
    reconnect_delay: float = DEFAULT_RECONNECT_DELAY
    max_reconnect_attempts: int = DEFAULT_MAX_RECONNECT_ATTEMPTS
    heartbeat: float | None = DEFAULT_HEARTBEAT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    topics: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.url.strip():
            raise PosSyncConfigError("url must be non-empty")
        if self.reconnect_delay < 0:
            raise PosSyncConfigError("reconnect_delay must be >= 0")
        if self.max_reconnect_attempts < 0:
            raise PosSyncConfigError("max_reconnect_attempts must be >= 0")
        if self.connect_timeout <= 0:
            raise PosSyncConfigError("connect_timeout must be > 0")

    @classmethod
    def from_env(cls, **overrides: Any) -> SyncConfig:
        """Create configuration from ``POS_SYNC_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        url = env.get("POS_SYNC_URL")
        if url is not None:
            config_kwargs["url"] = url

        delay_env = env.get("POS_SYNC_RECONNECT_DELAY")
        if delay_env is not None:
            config_kwargs["reconnect_delay"] = _env_float("POS_SYNC_RECONNECT_DELAY", delay_env)

        attempts_env = env.get("POS_SYNC_MAX_RECONNECT_ATTEMPTS")
        if attempts_env is not None:
            config_kwargs["max_reconnect_attempts"] = _env_int("POS_SYNC_MAX_RECONNECT_ATTEMPTS", attempts_env)

        heartbeat_env = env.get("POS_SYNC_HEARTBEAT")
        if heartbeat_env is not None:
            config_kwargs["heartbeat"] = _env_heartbeat(heartbeat_env)

        timeout_env = env.get("POS_SYNC_CONNECT_TIMEOUT")
        if timeout_env is not None:
            config_kwargs["connect_timeout"] = _env_float("POS_SYNC_CONNECT_TIMEOUT", timeout_env)

        topics_env = env.get("POS_SYNC_TOPICS")
        if topics_env is not None:
            config_kwargs["topics"] = _env_topics(topics_env)

        topics_override = overrides.get("topics")
        if isinstance(topics_override, (list, set)):
            overrides["topics"] = tuple(topics_override)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
