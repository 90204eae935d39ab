"""End-of-life save hooks.

This module triggers one best-effort store save when the process exits
normally, receives SIGTERM, or loses a thread to an uncaught exception.
Hooks are installed explicitly by the host and hold their own store and
path references.
"""

from __future__ import annotations

import atexit
from contextlib import contextmanager
import signal
import sys
import threading
from types import FrameType, TracebackType
from typing import Any, Callable, Iterator

from core.constants import DEFAULT_STOP_GRACE_SECONDS
from core.errors import CacheDbTimeoutError
from core.logging_config import get_logger
from persistence.autosave import AutosavePolicy
from persistence.file_persistence import PathLike, PersistenceController
from store.dual_index_store import DualIndexStore

_LOGGER = get_logger(__name__)

SysExceptHook = Callable[[type[BaseException], BaseException, TracebackType | None], Any]
ThreadExceptHook = Callable[[Any], Any]

_FAILURE_HANDLED_ATTR = "_cachedb_failure_handled"


class LifecycleGuard:
    """Final-save hooks for one store and data file.

    A guard registers at most one termination hook and one failure hook no
    matter how often install is called. Errors from the final save are
    logged and never propagated.
    """

    def __init__(
        self,
        store: DualIndexStore,
        controller: PersistenceController,
        file_path: PathLike,
        autosave: AutosavePolicy | None = None,
        handle_signals: bool = True,
        save_timeout_seconds: float = DEFAULT_STOP_GRACE_SECONDS,
    ) -> None:
        self._store = store
        self._controller = controller
        self._file_path = file_path
        self._autosave = autosave
        self._handle_signals = handle_signals
        self._save_timeout = save_timeout_seconds
        self._lock = threading.Lock()
        self._installed = False
        self._shutdown_done = False
        self._previous_thread_hook: ThreadExceptHook | None = None
        self._previous_sys_hook: SysExceptHook | None = None
        self._previous_sigterm: Any = None
        self._sigterm_installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> bool:
        """Register the termination and failure hooks.

        Returns:
            True on first registration, False if already installed.
        """
        with self._lock:
            if self._installed:
                return False
            atexit.register(self.on_termination)
            self._previous_thread_hook = threading.excepthook
            threading.excepthook = self._thread_excepthook
            self._previous_sys_hook = sys.excepthook
            sys.excepthook = self._sys_excepthook
            if self._handle_signals and threading.current_thread() is threading.main_thread():
                self._previous_sigterm = signal.signal(signal.SIGTERM, self._on_sigterm)
                self._sigterm_installed = True
            self._installed = True
            self._shutdown_done = False
        _LOGGER.info(
            "lifecycle_guard_installed",
            path=str(self._file_path),
            handle_signals=self._sigterm_installed,
        )
        return True

    def uninstall(self) -> bool:
        """Restore the hooks that were active before install.

        Returns:
            True when hooks were removed, False if not installed.
        """
        with self._lock:
            if not self._installed:
                return False
            atexit.unregister(self.on_termination)
            if threading.excepthook == self._thread_excepthook and self._previous_thread_hook:
                threading.excepthook = self._previous_thread_hook
            if sys.excepthook == self._sys_excepthook and self._previous_sys_hook:
                sys.excepthook = self._previous_sys_hook
            if self._sigterm_installed:
                signal.signal(signal.SIGTERM, self._previous_sigterm or signal.SIG_DFL)
                self._sigterm_installed = False
            self._installed = False
        return True

    def on_termination(self) -> None:
        """Stop autosave and save a non-empty store once at shutdown."""
        with self._lock:
            if self._shutdown_done:
                return
            self._shutdown_done = True
        if self._autosave is not None:
            self._autosave.stop()
        if self._store.size() == 0:
            return
        _LOGGER.info("shutdown_save_started", path=str(self._file_path))
        try:
            self._controller.save(
                self._store, self._file_path, acquire_timeout=self._save_timeout
            )
        except CacheDbTimeoutError as error:
            _LOGGER.warning("shutdown_save_skipped", path=str(self._file_path), error=str(error))
        except Exception as error:
            _LOGGER.error("shutdown_save_failed", path=str(self._file_path), error=str(error))

    def on_failure(self, thread_name: str, error: BaseException | None) -> None:
        """Save a non-empty store after an uncaught exception.

        Each exception triggers at most one save, so a failure already handled
        by fault_boundary is skipped when it reaches an excepthook.
        """
        if error is not None and not _claim_failure(error):
            return
        _LOGGER.error(
            "uncaught_thread_exception",
            thread=thread_name,
            error=repr(error),
        )
        if self._store.size() == 0:
            return
        try:
            self._controller.save(
                self._store, self._file_path, acquire_timeout=self._save_timeout
            )
        except Exception as save_error:
            _LOGGER.error("crash_save_failed", path=str(self._file_path), error=str(save_error))
            return
        _LOGGER.info("crash_save_completed", path=str(self._file_path))

    @contextmanager
    def fault_boundary(self, unit_name: str = "work") -> Iterator[None]:
        """Run the failure hook if the wrapped block raises, then re-raise."""
        try:
            yield
        except Exception as error:
            self.on_failure(unit_name, error)
            raise

    def _thread_excepthook(self, args: Any) -> None:
        thread = getattr(args, "thread", None)
        thread_name = thread.name if thread is not None else "unknown"
        if args.exc_type is not SystemExit:
            self.on_failure(thread_name, args.exc_value)
        if self._previous_thread_hook is not None:
            self._previous_thread_hook(args)

    def _sys_excepthook(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: TracebackType | None,
    ) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            self.on_failure(threading.current_thread().name, exc_value)
        if self._previous_sys_hook is not None:
            self._previous_sys_hook(exc_type, exc_value, exc_traceback)

    def _on_sigterm(self, signum: int, frame: FrameType | None) -> None:
        _LOGGER.warning("termination_signal_received", signum=signum)
        raise SystemExit(128 + signum)


def _claim_failure(error: BaseException) -> bool:
    """Mark an exception as handled; False if a hook already handled it."""
    if getattr(error, _FAILURE_HANDLED_ATTR, False):
        return False
    try:
        setattr(error, _FAILURE_HANDLED_ATTR, True)
    except AttributeError:
        pass
    return True
