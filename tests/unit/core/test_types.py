"""Unit tests for the Record model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

import pytest

from core.types import Record


def test_record_assigns_uuid_and_second_precision_timestamp() -> None:
    """New records should get a UUID and a whole-second creation time."""
    record = Record(name="Jason", age=19)

    assert isinstance(record.record_id, UUID)
    assert record.created_at.microsecond == 0


def test_record_truncates_supplied_timestamp() -> None:
    """Supplied creation time should drop sub-second precision."""
    record = Record(name="Jason", age=19, created_at=datetime(2025, 1, 2, 3, 4, 5, 678))

    assert record.created_at_text == "2025-01-02 03:04:05"


def test_record_identifier_is_immutable() -> None:
    """Identifier should not change after construction."""
    record = Record(name="Jason", age=19)

    with pytest.raises(AttributeError):
        record.record_id = UUID(int=1)

    assert record.record_id != UUID(int=1)


def test_record_created_at_is_immutable() -> None:
    """Creation time should not change after construction."""
    record = Record(name="Jason", age=19)

    with pytest.raises(AttributeError):
        record.created_at = datetime(2000, 1, 1)

    assert record.created_at.year != 2000


def test_record_display_fields_are_mutable() -> None:
    """Name and age should remain writable."""
    record = Record(name="Jason", age=19)

    record.name = "Jay"
    record.age = 20

    assert (record.name, record.age) == ("Jay", 20)


def test_describe_renders_console_block() -> None:
    """Describe should render the ID, Name, Age block."""
    record = Record(name="Sarah", age=22, record_id=UUID(int=7))

    assert record.describe() == f"ID: {UUID(int=7)}\nName: Sarah\nAge: 22"
