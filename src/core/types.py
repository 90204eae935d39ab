"""Shared typed models.

This module defines the record value held by the dual-indexed store
and persisted by the file controller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from core.constants import CREATED_AT_FORMAT

_IMMUTABLE_FIELDS = frozenset({"record_id", "created_at"})


def _now_to_second() -> datetime:
    return datetime.now().replace(microsecond=0)


@dataclass
class Record:
    """Stored entity with a stable identifier and mutable display fields.

    Attributes:
        name: Display name, assumed unique across a store.
        age: Age in years; not validated.
        record_id: Globally unique identifier, fixed at construction.
        created_at: Local creation time at second precision, fixed at construction.
    """

    name: str
    age: int
    record_id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_now_to_second)

    def __post_init__(self) -> None:
        if self.created_at.microsecond:
            object.__setattr__(self, "created_at", self.created_at.replace(microsecond=0))

    def __setattr__(self, key: str, value: Any) -> None:
        if key in _IMMUTABLE_FIELDS and key in self.__dict__:
            raise AttributeError(f"Record.{key} cannot be changed after construction")
        object.__setattr__(self, key, value)

    @property
    def created_at_text(self) -> str:
        """Creation time rendered as ``yyyy-MM-dd HH:mm:ss``."""
        return self.created_at.strftime(CREATED_AT_FORMAT)

    def describe(self) -> str:
        """Render the record as a console block."""
        return f"ID: {self.record_id}\nName: {self.name}\nAge: {self.age}"
