"""CacheDB exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class CacheDbError(Exception):
    """Base exception for all CacheDB failures."""


class CacheDbConfigError(CacheDbError):
    """Raised for invalid runtime configuration."""


class CacheDbArgumentError(CacheDbError):
    """Raised for invalid records, paths, or duplicate identifiers."""


class CacheDbNotFoundError(CacheDbError):
    """Raised when a persisted store file does not exist."""


class CacheDbPersistenceError(CacheDbError):
    """Raised for file IO and payload decoding failures."""


class CacheDbTimeoutError(CacheDbPersistenceError):
    """Raised when a save cannot acquire the file lock in time."""
