"""Custom exception hierarchy for possync."""

from __future__ import annotations


class PosSyncError(Exception):
    """Base exception for all possync errors."""


class PosSyncConfigError(PosSyncError):
    """Invalid or missing configuration."""


class PosSyncTransportError(PosSyncError):
    """WebSocket-level failure (connect refused, handshake error, abnormal close).

    The connection manager catches these internally and feeds them into the
    reconnect state machine; they are only visible to code that talks to a
    connector directly.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
        code: int | None = None,
    ) -> None:
        self.url = url
        self.code = code
        super().__init__(message)


class EnvelopeError(PosSyncError):
    """Inbound frame could not be parsed into an :class:`Envelope`."""

    def __init__(self, message: str, *, raw: str | bytes | None = None) -> None:
        self.raw = raw
        super().__init__(message)
