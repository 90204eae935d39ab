"""Structured logging configuration.

This module initializes structlog once with a stable JSON format.
Rendered events are routed through stdlib logging so hosts keep
control of handlers and levels.
"""

from __future__ import annotations

import threading
from typing import Any

import structlog

_CONFIGURE_LOCK = threading.Lock()
_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with structured JSON output.
    """
    _configure_once()
    return structlog.get_logger(name)


def _configure_once() -> None:
    """Apply the shared processor chain on first use."""
    global _CONFIGURED
    with _CONFIGURE_LOCK:
        if _CONFIGURED:
            return
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _CONFIGURED = True
