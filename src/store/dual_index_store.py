"""Dual-indexed in-memory record store.

This module keeps records reachable by identifier and by display name.
Writers are serialized by one lock and publish a new immutable index
state per operation, so lock-free readers never see the two indices
out of step.
"""

from __future__ import annotations

from dataclasses import dataclass
import threading
from types import MappingProxyType
from typing import Iterable, Mapping
from uuid import UUID

from core.errors import CacheDbArgumentError
from core.types import Record


@dataclass(frozen=True)
class _IndexState:
    """One published generation of both indices."""

    by_id: Mapping[UUID, Record]
    by_name: Mapping[str, Record]


_EMPTY_STATE = _IndexState(by_id=MappingProxyType({}), by_name=MappingProxyType({}))


class DualIndexStore:
    """Thread-safe store with identifier and name lookups.

    Display names are assumed unique. When two stored records share a name,
    the most recently inserted one owns the name index entry; identifier
    lookups, size and snapshots are unaffected.

    Every mutation copies both index dicts, so a single write costs O(n)
    and a long insert loop costs O(n^2). This suits stores of up to a few
    thousand records where reads dominate.
    """

    def __init__(self) -> None:
        self._write_lock = threading.Lock()
        self._state = _EMPTY_STATE

    def add(self, *records: Record) -> None:
        """Insert a batch of records into both indices.

        Args:
            records: One or more records; stored by reference.

        Raises:
            CacheDbArgumentError: If the batch is empty, holds a non-record,
                or repeats an identifier already stored or within the batch.
        """
        with self._write_lock:
            state = self._state
            _validate_batch(records, state.by_id)
            by_id = dict(state.by_id)
            by_name = dict(state.by_name)
            for record in records:
                by_id[record.record_id] = record
                by_name[record.name] = record
            self._publish(by_id, by_name)

    def get_by_id(self, record_id: UUID | str) -> Record | None:
        """Return the record with the identifier, or None when absent."""
        key = _coerce_uuid(record_id)
        if key is None:
            return None
        return self._state.by_id.get(key)

    def get_by_name(self, name: str) -> Record | None:
        """Return the record with the display name, or None when absent."""
        return self._state.by_name.get(name)

    def remove_by_id(self, *record_ids: UUID | str) -> bool:
        """Remove records by identifier from both indices.

        Returns:
            True when at least one record was removed.
        """
        with self._write_lock:
            state = self._state
            by_id = dict(state.by_id)
            by_name = dict(state.by_name)
            removed_any = False
            for record_id in record_ids:
                key = _coerce_uuid(record_id)
                removed = by_id.pop(key, None) if key is not None else None
                if removed is not None:
                    _drop_name(by_name, removed)
                    removed_any = True
            if removed_any:
                self._publish(by_id, by_name)
        return removed_any

    def remove_by_name(self, *names: str) -> bool:
        """Remove records by display name from both indices.

        Returns:
            True when at least one record was removed.
        """
        with self._write_lock:
            state = self._state
            by_id = dict(state.by_id)
            by_name = dict(state.by_name)
            removed_any = False
            for name in names:
                removed = by_name.pop(name, None)
                if removed is not None:
                    by_id.pop(removed.record_id, None)
                    removed_any = True
            if removed_any:
                self._publish(by_id, by_name)
        return removed_any

    def rename(self, record_id: UUID | str, new_name: str) -> bool:
        """Change a stored record's name and move its name index entry.

        Returns:
            False when no record has the identifier.
        """
        with self._write_lock:
            state = self._state
            key = _coerce_uuid(record_id)
            record = state.by_id.get(key) if key is not None else None
            if record is None:
                return False
            by_name = dict(state.by_name)
            _drop_name(by_name, record)
            record.name = new_name
            by_name[new_name] = record
            self._publish(dict(state.by_id), by_name)
        return True

    def replace_all(self, records: Iterable[Record]) -> None:
        """Swap the whole store contents for a validated batch.

        The current contents survive unchanged if validation fails.

        Raises:
            CacheDbArgumentError: If the batch holds a non-record or a
                repeated identifier.
        """
        staged = tuple(records)
        _validate_batch(staged, {}, allow_empty=True)
        by_id = {record.record_id: record for record in staged}
        by_name = {record.name: record for record in staged}
        with self._write_lock:
            self._publish(by_id, by_name)

    def clear(self) -> None:
        """Remove every record from both indices."""
        with self._write_lock:
            self._state = _EMPTY_STATE

    def snapshot_all(self) -> tuple[Record, ...]:
        """Return a point-in-time tuple of all records in identifier order."""
        by_id = self._state.by_id
        return tuple(by_id[key] for key in sorted(by_id))

    def names(self) -> tuple[str, ...]:
        """Return the indexed display names in sorted order."""
        return tuple(sorted(self._state.by_name))

    def size(self) -> int:
        """Return the current record count."""
        return len(self._state.by_id)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, record_id: object) -> bool:
        if not isinstance(record_id, (UUID, str)):
            return False
        return self.get_by_id(record_id) is not None

    def _publish(self, by_id: dict[UUID, Record], by_name: dict[str, Record]) -> None:
        """Publish a new index generation; caller holds the write lock."""
        self._state = _IndexState(
            by_id=MappingProxyType(by_id),
            by_name=MappingProxyType(by_name),
        )


def _validate_batch(
    records: tuple[Record, ...],
    existing: Mapping[UUID, Record],
    allow_empty: bool = False,
) -> None:
    """Reject a batch before any index is touched.

    Raises:
        CacheDbArgumentError: On the first invalid element.
    """
    if not records and not allow_empty:
        raise CacheDbArgumentError("Cannot add an empty batch: pass at least one record.")
    seen: set[UUID] = set()
    for position, record in enumerate(records):
        if not isinstance(record, Record):
            raise CacheDbArgumentError(
                f"Invalid record at position {position}: expected Record, "
                f"got {type(record).__name__}."
            )
        if record.record_id in existing:
            raise CacheDbArgumentError(
                f"Record with id {record.record_id} already exists. "
                "Remove it first or use a new identifier."
            )
        if record.record_id in seen:
            raise CacheDbArgumentError(
                f"Record id {record.record_id} appears more than once in the batch."
            )
        seen.add(record.record_id)


def _drop_name(by_name: dict[str, Record], record: Record) -> None:
    # Only drop the entry when it still points at this record; a later
    # duplicate-name insert may own the slot.
    if by_name.get(record.name) is record:
        del by_name[record.name]


def _coerce_uuid(record_id: UUID | str) -> UUID | None:
    if isinstance(record_id, UUID):
        return record_id
    try:
        return UUID(str(record_id))
    except ValueError:
        return None
