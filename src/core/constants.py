"""Core constants used across CacheDB modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_FILE = Path(".cachedb") / "records.json"
DEFAULT_AUTOSAVE_INTERVAL_SECONDS = 1.0
DEFAULT_STOP_GRACE_SECONDS = 5.0
DEFAULT_FAILURE_ALERT_THRESHOLD = 5
CREATED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"
FILE_ENCODING = "utf-8"
JSON_INDENT = 2
PAYLOAD_ID_KEY = "ID"
PAYLOAD_NAME_KEY = "Name"
PAYLOAD_AGE_KEY = "Age"
PAYLOAD_CREATED_KEY = "Time Created"
TEMP_FILE_SUFFIX = ".tmp"
DEMO_NAMES = ("Alice", "Bob", "Charlie", "David", "Eve", "Fay", "George", "Hannah")
DEMO_MIN_AGE = 10
DEMO_MAX_AGE = 98
DEFAULT_DEMO_COUNT = 25
