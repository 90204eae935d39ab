"""Unit tests for the client wiring."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from core.config import CacheDbConfig
from persistence.database_sdk import CacheDbClient
from tests.record_factories import make_record


def _config(tmp_path: Path, autosave: bool = False) -> CacheDbConfig:
    return replace(
        CacheDbConfig.from_env(),
        data_file=tmp_path / "users.json",
        autosave_enabled=autosave,
        autosave_interval_seconds=0.05,
        handle_signals=False,
    )


def test_load_if_present_treats_missing_file_as_empty(tmp_path: Path) -> None:
    """Missing data file should load zero records without error."""
    client = CacheDbClient(_config(tmp_path))

    assert client.load_if_present() == 0
    assert client.store.size() == 0


def test_context_manager_saves_on_close(tmp_path: Path) -> None:
    """Leaving the client context should persist the store."""
    with CacheDbClient(_config(tmp_path)) as client:
        client.store.add(make_record("Alice"))
        assert client.guard.installed

    reopened = CacheDbClient(_config(tmp_path))
    reopened.load()

    assert reopened.store.get_by_name("Alice") is not None
    assert client.guard.installed is False


def test_open_starts_autosave_when_enabled(tmp_path: Path) -> None:
    """Autosave should run only when enabled in config."""
    client = CacheDbClient(_config(tmp_path, autosave=True)).open()
    running = client.autosave.is_running
    client.close()

    assert running is True and client.autosave.is_running is False


def test_open_loads_existing_file(tmp_path: Path) -> None:
    """Opening should rebuild the store from the data file."""
    first = CacheDbClient(_config(tmp_path))
    first.store.add(make_record("Bob", 50))
    first.save()

    second = CacheDbClient(_config(tmp_path)).open()
    second.close()

    assert second.store.get_by_name("Bob").age == 50


def test_close_without_loading_keeps_existing_file(tmp_path: Path) -> None:
    """Closing an empty, never-loaded client should not overwrite the data file."""
    first = CacheDbClient(_config(tmp_path))
    first.store.add(make_record("Carol", 41))
    first.save()

    fresh = CacheDbClient(_config(tmp_path)).open(load_existing=False)
    fresh.close()
    reopened = CacheDbClient(_config(tmp_path))
    reopened.load()

    assert reopened.store.get_by_name("Carol").age == 41
