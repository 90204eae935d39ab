"""Unit tests for Record JSON payload mapping."""

from __future__ import annotations

import json

import pytest

from store.record_payload import decode_records, encode_records, record_from_payload
from tests.record_factories import make_record

_ID = "6f1c1f6e-2b8e-4c7a-9a55-1c3d7e9b2f10"


def test_encode_uses_persisted_field_names() -> None:
    """Encoded objects should carry ID, Name, Age, and Time Created."""
    record = make_record("Alice", age=19, record_id=_ID)

    payload = json.loads(encode_records([record]))

    assert payload == [
        {"ID": _ID, "Name": "Alice", "Age": 19, "Time Created": "2025-11-16 09:30:15"}
    ]


def test_encode_empty_store_is_empty_array() -> None:
    """Empty record list should encode to a JSON empty array."""
    assert json.loads(encode_records([])) == []


def test_decode_restores_all_fields() -> None:
    """Decoded record should match the encoded field values."""
    text = json.dumps(
        [{"ID": _ID, "Name": "Bob", "Age": 50, "Time Created": "2025-11-16 10:00:00"}]
    )

    (record,) = decode_records(text)

    assert str(record.record_id) == _ID
    assert (record.name, record.age, record.created_at_text) == ("Bob", 50, "2025-11-16 10:00:00")


def test_decode_rejects_non_array_top_level() -> None:
    """Top-level object should be rejected."""
    with pytest.raises(ValueError, match="JSON array"):
        decode_records("{}")


def test_decode_rejects_invalid_json() -> None:
    """Truncated JSON should report a parse error."""
    with pytest.raises(ValueError, match="Invalid JSON"):
        decode_records('[{"ID": ')


def test_payload_missing_field_reports_position() -> None:
    """Missing fields should name the array index."""
    with pytest.raises(ValueError, match="index 2"):
        record_from_payload({"ID": _ID, "Name": "x", "Age": 1}, 2)


def test_payload_rejects_bad_timestamp() -> None:
    """Timestamps must use the second-precision local format."""
    payload = {"ID": _ID, "Name": "x", "Age": 1, "Time Created": "2025-11-16T10:00:00Z"}

    with pytest.raises(ValueError, match="Time Created"):
        record_from_payload(payload)


def test_payload_rejects_boolean_age() -> None:
    """Boolean ages should not pass as integers."""
    payload = {"ID": _ID, "Name": "x", "Age": True, "Time Created": "2025-11-16 10:00:00"}

    with pytest.raises(ValueError, match="Age"):
        record_from_payload(payload)
