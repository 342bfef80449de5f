"""Inbound frame parsing."""

from datetime import datetime, timezone

import pytest

from fleetdeck.live.messages import LiveMessage, MalformedMessageError, MessageType


def test_parse_frame_uses_data_field_and_stamps_receipt(sample_frames):
    stamp = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)

    message = LiveMessage.parse_frame(sample_frames["load_update"], received_at=stamp)

    assert message.type == "load_update"
    assert message.payload == {"id": 7, "status": "assigned"}
    assert message.received_at == stamp
    assert message.known_type is MessageType.LOAD_UPDATE


def test_parse_frame_falls_back_to_payload_then_remaining_fields(sample_frames):
    alert = LiveMessage.parse_frame(sample_frames["alert"])
    bare = LiveMessage.parse_frame('{"type": "weather_update", "region": "TX"}')
    tag_only = LiveMessage.parse_frame(b'{"type": "iot_update"}')

    assert alert.payload == {"title": "Load assigned successfully"}
    assert bare.payload == {"region": "TX"}
    assert tag_only.payload is None
    assert isinstance(alert.received_at, datetime)


def test_unknown_tags_are_accepted(sample_frames):
    message = LiveMessage.parse_frame(sample_frames["unknown"])

    assert message.type == "fuel_price_tick"
    assert message.known_type is None


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[1, 2, 3]",
        '"load_update"',
        '{"data": {"id": 1}}',
        '{"type": 5}',
        '{"type": ""}',
    ],
)
def test_malformed_frames_raise(raw):
    with pytest.raises(MalformedMessageError):
        LiveMessage.parse_frame(raw)
