"""Runtime configuration model for CacheDB.

This module owns all environment variable and config file parsing.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.constants import (
    DEFAULT_AUTOSAVE_INTERVAL_SECONDS,
    DEFAULT_DATA_FILE,
    DEFAULT_FAILURE_ALERT_THRESHOLD,
    DEFAULT_STOP_GRACE_SECONDS,
    FILE_ENCODING,
)
from core.errors import CacheDbConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")
_CONFIG_FILE_KEYS = (
    "data_file",
    "autosave_enabled",
    "autosave_interval_seconds",
    "stop_grace_seconds",
    "failure_alert_threshold",
    "handle_signals",
)


@dataclass(frozen=True)
class CacheDbConfig:
    """Validated runtime configuration.

    Attributes:
        data_file: JSON file the store is saved to and loaded from.
        autosave_enabled: Whether the background autosave runs.
        autosave_interval_seconds: Fixed period between autosave ticks.
        stop_grace_seconds: Bound on waiting for an in-flight save at stop.
        failure_alert_threshold: Consecutive autosave failures before an alert.
        handle_signals: Whether SIGTERM triggers the shutdown save.
    """

    data_file: Path
    autosave_enabled: bool
    autosave_interval_seconds: float
    stop_grace_seconds: float
    failure_alert_threshold: int
    handle_signals: bool

    @classmethod
    def from_env(cls) -> "CacheDbConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CacheDbConfigError: If environment values are invalid.
        """
        data_file_value = os.getenv("CACHEDB_DATA_FILE", str(DEFAULT_DATA_FILE))
        return cls(
            data_file=Path(data_file_value).expanduser().resolve(),
            autosave_enabled=_parse_bool(
                "CACHEDB_AUTOSAVE_ENABLED", os.getenv("CACHEDB_AUTOSAVE_ENABLED", "true")
            ),
            autosave_interval_seconds=_parse_positive_float(
                "CACHEDB_AUTOSAVE_INTERVAL",
                os.getenv("CACHEDB_AUTOSAVE_INTERVAL", str(DEFAULT_AUTOSAVE_INTERVAL_SECONDS)),
            ),
            stop_grace_seconds=_parse_positive_float(
                "CACHEDB_STOP_GRACE_SECONDS",
                os.getenv("CACHEDB_STOP_GRACE_SECONDS", str(DEFAULT_STOP_GRACE_SECONDS)),
            ),
            failure_alert_threshold=_parse_positive_int(
                "CACHEDB_FAILURE_ALERT_THRESHOLD",
                os.getenv(
                    "CACHEDB_FAILURE_ALERT_THRESHOLD", str(DEFAULT_FAILURE_ALERT_THRESHOLD)
                ),
            ),
            handle_signals=_parse_bool(
                "CACHEDB_HANDLE_SIGNALS", os.getenv("CACHEDB_HANDLE_SIGNALS", "true")
            ),
        )


def load_config_file(config_path: str, base: CacheDbConfig | None = None) -> CacheDbConfig:
    """Overlay a YAML config file onto a base config.

    Args:
        config_path: Path to a YAML mapping with CacheDbConfig field names.
        base: Config to overlay; environment config when omitted.

    Returns:
        Merged and validated config.

    Raises:
        CacheDbConfigError: If the file is missing, malformed, or has unknown keys.
    """
    base_config = base if base is not None else CacheDbConfig.from_env()
    config_file = Path(config_path).expanduser().resolve()
    if not config_file.exists():
        raise CacheDbConfigError(
            f"Config file does not exist at {config_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(config_file.read_text(encoding=FILE_ENCODING)))
    except OSError as error:
        raise CacheDbConfigError(
            f"Failed to read config at {config_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise CacheDbConfigError(
            f"Failed to parse YAML config at {config_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        return base_config
    if not isinstance(payload, Mapping):
        raise CacheDbConfigError(
            f"Invalid config at {config_file}: expected a mapping at top level."
        )
    return _apply_overrides(base_config, payload, config_file)


def _apply_overrides(
    base: CacheDbConfig,
    payload: Mapping[object, object],
    config_file: Path,
) -> CacheDbConfig:
    unknown_keys = sorted(str(key) for key in payload if key not in _CONFIG_FILE_KEYS)
    if unknown_keys:
        raise CacheDbConfigError(
            f"Unknown keys in config at {config_file}: {', '.join(unknown_keys)}. "
            f"Supported keys: {', '.join(_CONFIG_FILE_KEYS)}."
        )
    config = base
    if "data_file" in payload:
        data_file = Path(str(payload["data_file"])).expanduser()
        if not data_file.is_absolute():
            data_file = config_file.parent / data_file
        config = replace(config, data_file=data_file.resolve())
    if "autosave_enabled" in payload:
        config = replace(
            config,
            autosave_enabled=_parse_bool("autosave_enabled", payload["autosave_enabled"]),
        )
    if "autosave_interval_seconds" in payload:
        config = replace(
            config,
            autosave_interval_seconds=_parse_positive_float(
                "autosave_interval_seconds", payload["autosave_interval_seconds"]
            ),
        )
    if "stop_grace_seconds" in payload:
        config = replace(
            config,
            stop_grace_seconds=_parse_positive_float(
                "stop_grace_seconds", payload["stop_grace_seconds"]
            ),
        )
    if "failure_alert_threshold" in payload:
        config = replace(
            config,
            failure_alert_threshold=_parse_positive_int(
                "failure_alert_threshold", payload["failure_alert_threshold"]
            ),
        )
    if "handle_signals" in payload:
        config = replace(
            config,
            handle_signals=_parse_bool("handle_signals", payload["handle_signals"]),
        )
    return config


def _parse_bool(field_name: str, raw_value: object) -> bool:
    """Parse a boolean flag from env text or YAML scalar.

    Raises:
        CacheDbConfigError: If the value is not a recognized boolean.
    """
    if isinstance(raw_value, bool):
        return raw_value
    normalized = str(raw_value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise CacheDbConfigError(
        f"Invalid {field_name} value: expected boolean, got '{raw_value}'. "
        f"Use one of {', '.join(_TRUE_VALUES + _FALSE_VALUES)}."
    )


def _parse_positive_float(field_name: str, raw_value: object) -> float:
    """Parse a strictly positive number of seconds.

    Raises:
        CacheDbConfigError: If the value is not a positive number.
    """
    if isinstance(raw_value, bool):
        raise CacheDbConfigError(
            f"Invalid {field_name} value: expected number of seconds, got '{raw_value}'."
        )
    try:
        value = float(cast(str, raw_value))
    except (TypeError, ValueError) as error:
        raise CacheDbConfigError(
            f"Invalid {field_name} value: expected number of seconds, got '{raw_value}'. "
            "Set it to a positive numeric value."
        ) from error
    if value <= 0:
        raise CacheDbConfigError(
            f"Invalid {field_name} value: expected a positive number, got {value}."
        )
    return value


def _parse_positive_int(field_name: str, raw_value: object) -> int:
    """Parse a strictly positive integer.

    Raises:
        CacheDbConfigError: If the value is not a positive integer.
    """
    if isinstance(raw_value, bool):
        raise CacheDbConfigError(
            f"Invalid {field_name} value: expected integer, got '{raw_value}'."
        )
    try:
        value = int(cast(str, raw_value))
    except (TypeError, ValueError) as error:
        raise CacheDbConfigError(
            f"Invalid {field_name} value: expected integer, got '{raw_value}'. "
            "Set it to a positive numeric value."
        ) from error
    if value <= 0:
        raise CacheDbConfigError(
            f"Invalid {field_name} value: expected a positive integer, got {value}."
        )
    return value
