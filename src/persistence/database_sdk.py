"""Client wiring for a persisted CacheDB store.

This module builds the store, file controller, autosave policy, and
lifecycle guard from one config object so hosts make a single call.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType

from core.config import CacheDbConfig
from core.errors import CacheDbNotFoundError
from core.logging_config import get_logger
from persistence.autosave import AutosavePolicy
from persistence.file_persistence import PersistenceController
from persistence.lifecycle_guard import LifecycleGuard
from store.dual_index_store import DualIndexStore

_LOGGER = get_logger(__name__)


class CacheDbClient:
    """Store plus its persistence lifecycle.

    Attributes:
        config: Runtime configuration.
        store: The shared dual-indexed store.
        persistence: File save/load controller.
        autosave: Background autosave policy.
        guard: Shutdown and crash save hooks.
    """

    def __init__(self, config: CacheDbConfig, store: DualIndexStore | None = None) -> None:
        self.config = config
        self.store = store if store is not None else DualIndexStore()
        self.persistence = PersistenceController()
        self.autosave = AutosavePolicy(
            self.store,
            self.persistence,
            interval_seconds=config.autosave_interval_seconds,
            stop_grace_seconds=config.stop_grace_seconds,
            failure_alert_threshold=config.failure_alert_threshold,
        )
        self.guard = LifecycleGuard(
            self.store,
            self.persistence,
            config.data_file,
            autosave=self.autosave,
            handle_signals=config.handle_signals,
            save_timeout_seconds=config.stop_grace_seconds,
        )
        self._synced_with_file = False

    @property
    def data_file(self) -> Path:
        return self.config.data_file

    def open(self, load_existing: bool = True) -> "CacheDbClient":
        """Load the data file if present, then start hooks and autosave.

        Args:
            load_existing: Whether to rebuild the store from the data file.

        Returns:
            This client, for chaining.
        """
        if load_existing:
            self.load_if_present()
        self.guard.install()
        if self.config.autosave_enabled:
            self.autosave.start(self.config.data_file)
        return self

    def close(self) -> None:
        """Stop autosave, save once, and remove lifecycle hooks.

        An empty store that never read the data file is not saved, so opening
        with load_existing=False and closing leaves an existing file intact.
        """
        self.autosave.stop()
        if self.store.size() == 0 and not self._synced_with_file:
            _LOGGER.info("close_save_skipped", path=str(self.config.data_file))
        else:
            self.save()
        self.guard.uninstall()

    def load_if_present(self) -> int:
        """Load the data file, treating a missing file as an empty store.

        Returns:
            Number of records loaded.
        """
        try:
            loaded = self.persistence.load(self.store, self.config.data_file)
        except CacheDbNotFoundError:
            _LOGGER.info("data_file_missing", path=str(self.config.data_file))
            loaded = 0
        self._synced_with_file = True
        return loaded

    def save(self) -> int:
        """Save the store to the configured data file."""
        saved = self.persistence.save(self.store, self.config.data_file)
        self._synced_with_file = True
        return saved

    def load(self) -> int:
        """Replace the store contents from the configured data file."""
        loaded = self.persistence.load(self.store, self.config.data_file)
        self._synced_with_file = True
        return loaded

    def __enter__(self) -> "CacheDbClient":
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
