"""Wire envelope exchanged with the POS realtime server."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from possync.exceptions import EnvelopeError
from possync.models._base import Instant


class MessageType(StrEnum):
    """Server message types consumed by the sync core."""

    DASHBOARD_UPDATE = "dashboard:update"
    INVENTORY_UPDATE = "inventory:update"
    ORDER_COMPLETED = "order:completed"
    SALES_METRICS = "sales:metrics"
    # Replies to outbound control messages.
    PONG = "pong"
    SUBSCRIPTION_CONFIRMED = "subscription:confirmed"
    UNSUBSCRIPTION_CONFIRMED = "unsubscription:confirmed"


class LifecycleTopic(StrEnum):
    """Transport health topics published by the connection manager."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Envelope(BaseModel):
    """A single typed message: ``{type, payload, timestamp}``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: Instant = Field(default_factory=_utcnow)

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("type must be non-empty")
        return text

    @field_validator("payload", mode="before")
    @classmethod
    def _payload_object(cls, value: Any) -> Any:
        # The server sends ``payload: null`` for bare notifications.
        if value is None:
            return {}
        return value

    def to_wire(self) -> str:
        """Render as the JSON text frame the server expects."""
        return json.dumps(
            {
                "type": self.type,
                "payload": self.payload,
                "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
            },
            separators=(",", ":"),
            default=str,
        )


def parse_envelope(raw: str | bytes) -> Envelope:
    """Parse a raw text frame into an :class:`Envelope`.

    Raises :class:`EnvelopeError` on invalid JSON, a non-object document, or
    a document missing a usable ``type``. A missing timestamp defaults to the
    receipt time.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        document = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise EnvelopeError(f"frame is not valid JSON: {exc}", raw=raw) from exc

    if not isinstance(document, dict):
        raise EnvelopeError("frame decoded to non-object JSON", raw=raw)

    try:
        return Envelope.model_validate(document)
    except ValidationError as exc:
        raise EnvelopeError(f"frame is not a valid envelope: {exc.error_count()} error(s)", raw=raw) from exc
