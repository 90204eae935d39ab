"""Public SDK surface for CacheDB.

This module provides a stable import path for library users.
It re-exports the store, persistence components, and typed models.
"""

from __future__ import annotations

from core.config import CacheDbConfig, load_config_file
from core.errors import (
    CacheDbArgumentError,
    CacheDbConfigError,
    CacheDbError,
    CacheDbNotFoundError,
    CacheDbPersistenceError,
)
from core.types import Record
from persistence.autosave import AutosavePolicy, AutosaveState
from persistence.database_sdk import CacheDbClient
from persistence.file_persistence import PersistenceController
from persistence.lifecycle_guard import LifecycleGuard
from store.dual_index_store import DualIndexStore

__all__ = [
    "AutosavePolicy",
    "AutosaveState",
    "CacheDbArgumentError",
    "CacheDbClient",
    "CacheDbConfig",
    "CacheDbConfigError",
    "CacheDbError",
    "CacheDbNotFoundError",
    "CacheDbPersistenceError",
    "DualIndexStore",
    "LifecycleGuard",
    "PersistenceController",
    "Record",
    "load_config_file",
]
