"""Shared record builders for tests."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from core.types import Record


def make_record(name: str, age: int = 30, record_id: str | None = None) -> Record:
    """Build a record with a fixed creation time.

    Args:
        name: Display name.
        age: Age in years.
        record_id: Optional UUID string.

    Returns:
        Record instance.
    """
    if record_id is None:
        return Record(name=name, age=age, created_at=datetime(2025, 11, 16, 9, 30, 15))
    return Record(
        name=name,
        age=age,
        record_id=UUID(record_id),
        created_at=datetime(2025, 11, 16, 9, 30, 15),
    )


def record_fields(records) -> set[tuple[str, str, int, str]]:
    """Project records onto comparable field tuples."""
    return {
        (str(record.record_id), record.name, record.age, record.created_at_text)
        for record in records
    }
