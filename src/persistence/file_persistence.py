"""Store file persistence.

This module saves a store snapshot to a JSON file and rebuilds a store
from such a file. Saves write a sibling temporary file and rename it over
the target, so readers see either the previous or the new complete file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
import threading

from core.constants import FILE_ENCODING, JSON_INDENT, TEMP_FILE_SUFFIX
from core.errors import (
    CacheDbArgumentError,
    CacheDbNotFoundError,
    CacheDbPersistenceError,
    CacheDbTimeoutError,
)
from core.logging_config import get_logger
from core.types import Record
from store.dual_index_store import DualIndexStore
from store.record_payload import (
    decode_records,
    encode_records,
    record_from_payload,
    record_to_payload,
)

_LOGGER = get_logger(__name__)

PathLike = str | os.PathLike[str]


class PersistenceController:
    """Filesystem-backed save and load for a DualIndexStore.

    Saves and loads issued through one controller never run concurrently.
    The store's write lock is only touched while taking the snapshot.
    """

    def __init__(self) -> None:
        self._io_lock = threading.Lock()

    def save(
        self,
        store: DualIndexStore,
        file_path: PathLike | None,
        acquire_timeout: float | None = None,
    ) -> int:
        """Write every record in the store to a JSON file.

        Args:
            store: Store to snapshot.
            file_path: Target file; parent directories are created.
            acquire_timeout: Seconds to wait for an in-flight save or load.
                None waits indefinitely.

        Returns:
            Number of records written.

        Raises:
            CacheDbArgumentError: If the path is empty.
            CacheDbTimeoutError: If another save or load holds the file lock
                past acquire_timeout.
            CacheDbPersistenceError: If the file cannot be written.
        """
        target = _require_path(file_path)
        timeout = -1 if acquire_timeout is None else max(0.0, acquire_timeout)
        if not self._io_lock.acquire(timeout=timeout):
            raise CacheDbTimeoutError(
                f"Timed out after {acquire_timeout}s waiting to save {target}. "
                "Another save is still in progress."
            )
        try:
            records = store.snapshot_all()
            target = ensure_file(target)
            _atomic_write_text(target, encode_records(records))
        finally:
            self._io_lock.release()
        _LOGGER.info("records_saved", path=str(target), record_count=len(records))
        return len(records)

    def load(self, store: DualIndexStore, file_path: PathLike | None) -> int:
        """Replace the store contents with the records in a JSON file.

        All records are decoded and validated before the store changes, so a
        failed load leaves the store as it was.

        Args:
            store: Store to repopulate.
            file_path: Source file written by save.

        Returns:
            Number of records loaded.

        Raises:
            CacheDbArgumentError: If the path is empty or the file repeats an id.
            CacheDbNotFoundError: If the file does not exist.
            CacheDbPersistenceError: If the file cannot be read or decoded.
        """
        source = _require_path(file_path)
        with self._io_lock:
            text = _read_existing_text(source)
            try:
                records = decode_records(text)
            except ValueError as error:
                raise CacheDbPersistenceError(
                    f"Failed to decode store file at {source}: {error}. "
                    "Restore the file from a backup or delete it to start empty."
                ) from error
            store.replace_all(records)
        _LOGGER.info("records_loaded", path=str(source), record_count=len(records))
        return len(records)

    def save_record(self, record: Record, file_path: PathLike | None) -> Path:
        """Write a single record to its own JSON file.

        Raises:
            CacheDbArgumentError: If the record is None or the path is empty.
            CacheDbPersistenceError: If the file cannot be written.
        """
        if not isinstance(record, Record):
            raise CacheDbArgumentError("Record cannot be None when saving a record file.")
        target = ensure_file(_require_path(file_path))
        text = json.dumps(record_to_payload(record), indent=JSON_INDENT, ensure_ascii=False)
        _atomic_write_text(target, text + "\n")
        return target

    def load_record(self, file_path: PathLike | None) -> Record:
        """Read a single record written by save_record.

        Raises:
            CacheDbNotFoundError: If the file does not exist.
            CacheDbPersistenceError: If the file cannot be read or decoded.
        """
        source = _require_path(file_path)
        text = _read_existing_text(source)
        try:
            return record_from_payload(json.loads(text))
        except ValueError as error:
            raise CacheDbPersistenceError(
                f"Failed to decode record file at {source}: {error}."
            ) from error


def ensure_directory(directory: PathLike | None) -> Path:
    """Create a directory and its parents if missing.

    Returns:
        Absolute normalized directory path.

    Raises:
        CacheDbArgumentError: If the path is empty.
        CacheDbPersistenceError: If the directory cannot be created.
    """
    directory_path = _require_path(directory).expanduser().resolve()
    if directory_path.is_dir():
        return directory_path
    try:
        directory_path.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise CacheDbPersistenceError(
            f"Failed to create directory {directory_path}: {error}. "
            "Check permissions or choose another data file location."
        ) from error
    _LOGGER.info("directory_ensured", path=str(directory_path))
    return directory_path


def ensure_file(file_path: PathLike | None) -> Path:
    """Create a file and its parent directory if missing.

    Returns:
        Absolute normalized file path.

    Raises:
        CacheDbArgumentError: If the path is empty.
        CacheDbPersistenceError: If the file cannot be created.
    """
    target = _require_path(file_path).expanduser().resolve()
    if target.is_file():
        return target
    ensure_directory(target.parent)
    try:
        target.touch(exist_ok=True)
    except OSError as error:
        raise CacheDbPersistenceError(
            f"Failed to create file {target}: {error}. "
            "Check permissions or choose another data file location."
        ) from error
    _LOGGER.info("file_ensured", path=str(target))
    return target


def delete_file(file_path: PathLike | None) -> bool:
    """Delete a file if it exists.

    Returns:
        True when a file was deleted.

    Raises:
        CacheDbArgumentError: If the path is empty.
        CacheDbPersistenceError: If the file exists but cannot be deleted.
    """
    target = _require_path(file_path).expanduser().resolve()
    if not target.exists():
        return False
    try:
        target.unlink()
    except OSError as error:
        raise CacheDbPersistenceError(f"Failed to delete {target}: {error}.") from error
    _LOGGER.info("file_deleted", path=str(target))
    return True


def _require_path(file_path: PathLike | None) -> Path:
    if file_path is None or not str(file_path).strip():
        raise CacheDbArgumentError("File path cannot be empty. Provide a data file path.")
    return Path(file_path)


def _read_existing_text(source: Path) -> str:
    if not source.is_file():
        raise CacheDbNotFoundError(
            f"Store file not found at {source}. Save the store once before loading."
        )
    try:
        return source.read_text(encoding=FILE_ENCODING)
    except OSError as error:
        raise CacheDbPersistenceError(
            f"Failed to read {source}: {error}. Check file permissions and retry."
        ) from error


def _atomic_write_text(target: Path, text: str) -> None:
    """Write text to a sibling temporary file and rename it into place.

    Raises:
        CacheDbPersistenceError: If writing or renaming fails.
    """
    temp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=FILE_ENCODING,
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=TEMP_FILE_SUFFIX,
            delete=False,
        ) as handle:
            temp_name = handle.name
            handle.write(text)
            handle.flush()
        os.replace(temp_name, target)
    except (OSError, ValueError) as error:
        # UnicodeEncodeError from write is a ValueError.
        if temp_name is not None and os.path.exists(temp_name):
            os.unlink(temp_name)
        raise CacheDbPersistenceError(
            f"Failed to write {target}: {error}. "
            "Check free disk space, permissions and record text, then retry."
        ) from error
