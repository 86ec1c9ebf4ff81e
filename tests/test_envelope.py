from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from possync.exceptions import EnvelopeError
from possync.models.envelope import Envelope, MessageType, parse_envelope


def test_parse_valid_frame() -> None:
    envelope = parse_envelope(
        '{"type": "inventory:update", "payload": {"lowStockItems": 3}, "timestamp": "2024-05-15T12:00:00.000Z"}'
    )

    assert envelope.type == MessageType.INVENTORY_UPDATE
    assert envelope.payload == {"lowStockItems": 3}
    assert envelope.timestamp == datetime(2024, 5, 15, 12, 0, tzinfo=UTC)


def test_missing_timestamp_defaults_to_receipt_time() -> None:
    before = datetime.now(UTC)
    envelope = parse_envelope(b'{"type": "pong"}')

    assert envelope.payload == {}
    assert envelope.timestamp >= before


def test_null_payload_becomes_empty_object() -> None:
    assert parse_envelope('{"type": "pong", "payload": null}').payload == {}


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[1, 2, 3]",
        '{"payload": {}}',
        '{"type": "   "}',
        '{"type": "pong", "timestamp": "yesterday"}',
        '{"type": "pong", "payload": [1]}',
        b"\xff\xfe",
    ],
)
def test_malformed_frames_raise_envelope_error(raw: str | bytes) -> None:
    with pytest.raises(EnvelopeError) as excinfo:
        parse_envelope(raw)
    assert excinfo.value.raw == raw


def test_to_wire_uses_utc_designator() -> None:
    envelope = Envelope(
        type="order:create",
        payload={"items": [{"productId": 1, "quantity": 2}]},
        timestamp=datetime(2024, 5, 15, 12, 0, tzinfo=UTC),
    )

    assert json.loads(envelope.to_wire()) == {
        "type": "order:create",
        "payload": {"items": [{"productId": 1, "quantity": 2}]},
        "timestamp": "2024-05-15T12:00:00Z",
    }
