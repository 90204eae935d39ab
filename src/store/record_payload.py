"""Shared JSON serialization for Record payloads.

This module centralizes Record JSON field mapping and validation.
It is reused by whole-store persistence and single-record files.
"""

from __future__ import annotations

from datetime import datetime
import json
from typing import Any, Sequence
from uuid import UUID

from core.constants import (
    CREATED_AT_FORMAT,
    JSON_INDENT,
    PAYLOAD_AGE_KEY,
    PAYLOAD_CREATED_KEY,
    PAYLOAD_ID_KEY,
    PAYLOAD_NAME_KEY,
)
from core.types import Record


def record_to_payload(record: Record) -> dict[str, object]:
    """Serialize Record into JSON-safe payload.

    Args:
        record: Record instance.

    Returns:
        Dictionary payload for JSON encoding.
    """
    return {
        PAYLOAD_ID_KEY: str(record.record_id),
        PAYLOAD_NAME_KEY: record.name,
        PAYLOAD_AGE_KEY: record.age,
        PAYLOAD_CREATED_KEY: record.created_at.strftime(CREATED_AT_FORMAT),
    }


def record_from_payload(payload: Any, position: int | None = None) -> Record:
    """Deserialize JSON payload into Record.

    Args:
        payload: Parsed JSON object for one record.
        position: Optional zero-based array index used in error messages.

    Returns:
        Parsed Record.

    Raises:
        ValueError: If the payload is missing fields or has invalid values.
    """
    location = f"record at index {position}" if position is not None else "record"
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid {location}: expected JSON object")
    missing = [
        key
        for key in (PAYLOAD_ID_KEY, PAYLOAD_NAME_KEY, PAYLOAD_AGE_KEY, PAYLOAD_CREATED_KEY)
        if key not in payload
    ]
    if missing:
        raise ValueError(f"Invalid {location}: missing fields {', '.join(missing)}")
    name = payload[PAYLOAD_NAME_KEY]
    age = payload[PAYLOAD_AGE_KEY]
    if not isinstance(name, str):
        raise ValueError(f"Invalid {location}: '{PAYLOAD_NAME_KEY}' must be a string")
    if isinstance(age, bool) or not isinstance(age, int):
        raise ValueError(f"Invalid {location}: '{PAYLOAD_AGE_KEY}' must be an integer")
    try:
        record_id = UUID(str(payload[PAYLOAD_ID_KEY]))
    except ValueError as error:
        raise ValueError(f"Invalid {location}: '{PAYLOAD_ID_KEY}' is not a UUID") from error
    try:
        created_at = datetime.strptime(str(payload[PAYLOAD_CREATED_KEY]), CREATED_AT_FORMAT)
    except ValueError as error:
        raise ValueError(
            f"Invalid {location}: '{PAYLOAD_CREATED_KEY}' must match yyyy-MM-dd HH:mm:ss"
        ) from error
    return Record(name=name, age=age, record_id=record_id, created_at=created_at)


def encode_records(records: Sequence[Record]) -> str:
    """Encode records as a pretty-printed JSON array."""
    payloads = [record_to_payload(record) for record in records]
    return json.dumps(payloads, indent=JSON_INDENT, ensure_ascii=False) + "\n"


def decode_records(text: str) -> list[Record]:
    """Decode a JSON array of record payloads.

    Args:
        text: Raw file contents.

    Returns:
        Parsed records in file order.

    Raises:
        ValueError: If the text is not a JSON array of valid record objects.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as error:
        raise ValueError(f"Invalid JSON at line {error.lineno}: {error.msg}") from error
    if not isinstance(payload, list):
        raise ValueError("Invalid payload: expected JSON array at top level")
    return [record_from_payload(item, position) for position, item in enumerate(payload)]
