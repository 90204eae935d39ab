"""Periodic background autosave.

This module runs store saves on a fixed-rate daemon thread. Ticks never
overlap: a save that overruns one or more deadlines causes the missed
ticks to be skipped rather than queued.
"""

from __future__ import annotations

from enum import Enum
import threading
import time

from core.constants import (
    DEFAULT_AUTOSAVE_INTERVAL_SECONDS,
    DEFAULT_FAILURE_ALERT_THRESHOLD,
    DEFAULT_STOP_GRACE_SECONDS,
)
from core.errors import CacheDbArgumentError
from core.logging_config import get_logger
from persistence.file_persistence import PathLike, PersistenceController
from store.dual_index_store import DualIndexStore

_LOGGER = get_logger(__name__)


class AutosaveState(str, Enum):
    """Autosave lifecycle states."""

    STOPPED = "stopped"
    RUNNING = "running"


class AutosavePolicy:
    """Fixed-rate autosave with idempotent start and stop.

    Failed saves are logged and retried on the next tick without limit.
    Once consecutive failures reach the alert threshold an error-level
    event is emitted; the counter resets after a successful save.
    """

    def __init__(
        self,
        store: DualIndexStore,
        controller: PersistenceController,
        interval_seconds: float = DEFAULT_AUTOSAVE_INTERVAL_SECONDS,
        stop_grace_seconds: float = DEFAULT_STOP_GRACE_SECONDS,
        failure_alert_threshold: int = DEFAULT_FAILURE_ALERT_THRESHOLD,
    ) -> None:
        if interval_seconds <= 0:
            raise CacheDbArgumentError(
                f"Autosave interval must be positive, got {interval_seconds}."
            )
        if stop_grace_seconds < 0:
            raise CacheDbArgumentError(
                f"Autosave stop grace period cannot be negative, got {stop_grace_seconds}."
            )
        self._store = store
        self._controller = controller
        self._interval = float(interval_seconds)
        self._stop_grace = float(stop_grace_seconds)
        self._alert_threshold = max(1, int(failure_alert_threshold))
        self._state_lock = threading.Lock()
        self._state = AutosaveState.STOPPED
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None
        self._file_path: PathLike | None = None
        self.completed_saves = 0
        self.failed_saves = 0
        self.skipped_ticks = 0
        self.consecutive_failures = 0

    @property
    def state(self) -> AutosaveState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Whether the schedule is active."""
        return self._state is AutosaveState.RUNNING

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def stop_grace_seconds(self) -> float:
        return self._stop_grace

    def start(self, file_path: PathLike) -> bool:
        """Begin saving the store to file_path every interval.

        Returns:
            True when the schedule was started, False if already running.

        Raises:
            CacheDbArgumentError: If the path is empty.
        """
        if file_path is None or not str(file_path).strip():
            raise CacheDbArgumentError("Autosave file path cannot be empty.")
        with self._state_lock:
            if self._state is AutosaveState.RUNNING:
                return False
            self._file_path = file_path
            self._stop_event = threading.Event()
            worker = threading.Thread(
                target=self._run,
                args=(self._stop_event, file_path),
                name="cachedb-autosave",
                daemon=True,
            )
            self._worker = worker
            self._state = AutosaveState.RUNNING
            worker.start()
        _LOGGER.info("autosave_started", path=str(file_path), interval_seconds=self._interval)
        return True

    def stop(self) -> bool:
        """Cancel future ticks and wait a bounded time for an in-flight save.

        Returns:
            True when a running schedule was stopped, False if already stopped.
        """
        with self._state_lock:
            if self._state is AutosaveState.STOPPED:
                return False
            self._state = AutosaveState.STOPPED
            self._stop_event.set()
            worker = self._worker
            self._worker = None
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=self._stop_grace)
            if worker.is_alive():
                # The daemon worker is abandoned; it cannot block interpreter exit.
                _LOGGER.warning(
                    "autosave_stop_timeout",
                    path=str(self._file_path),
                    grace_seconds=self._stop_grace,
                )
        _LOGGER.info("autosave_stopped", path=str(self._file_path))
        return True

    def _run(self, stop_event: threading.Event, file_path: PathLike) -> None:
        next_deadline = time.monotonic() + self._interval
        while not stop_event.wait(max(0.0, next_deadline - time.monotonic())):
            self._tick(file_path)
            next_deadline = self._advance_deadline(next_deadline)

    def _advance_deadline(self, deadline: float) -> float:
        """Return the next future deadline, counting overrun ticks as skipped."""
        next_deadline = deadline + self._interval
        now = time.monotonic()
        if next_deadline > now:
            return next_deadline
        missed = int((now - next_deadline) // self._interval) + 1
        self.skipped_ticks += missed
        _LOGGER.debug("autosave_ticks_skipped", skipped=missed)
        return next_deadline + missed * self._interval

    def _tick(self, file_path: PathLike) -> None:
        try:
            self._controller.save(self._store, file_path)
        except Exception as error:
            self.failed_saves += 1
            self.consecutive_failures += 1
            _LOGGER.warning(
                "autosave_failed",
                path=str(file_path),
                error=str(error),
                error_type=type(error).__name__,
                consecutive_failures=self.consecutive_failures,
            )
            if self.consecutive_failures == self._alert_threshold:
                _LOGGER.error(
                    "autosave_failure_threshold_reached",
                    path=str(file_path),
                    consecutive_failures=self.consecutive_failures,
                )
            return
        self.completed_saves += 1
        self.consecutive_failures = 0
