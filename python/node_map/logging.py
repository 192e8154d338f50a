"""Structured logging for node_map.

This module provides structured logging functions on top of the
standard library logging module. All records go to the "node_map"
logger; hosts configure handlers and levels.

Example:
    from node_map import log_info, log_debug

    log_info("Registered provider", {
        "registry": "providers",
        "key": "file",
    })

    log_debug("No handler matched", LogContext(key="package"))
"""

from __future__ import annotations

import logging
from typing import Any

from .types import LogContext

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

logger = logging.getLogger("node_map")


def log_error(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an ERROR level message with structured fields.

    Args:
        message: The log message.
        fields: Optional structured fields for context. Can be a dict
                or a LogContext instance.
    """
    _log(logging.ERROR, message, fields)


def log_warn(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a WARN level message with structured fields.

    Use this for overwrites and dropped events.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _log(logging.WARNING, message, fields)


def log_info(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an INFO level message with structured fields.

    Use this for registrations and lifecycle changes.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _log(logging.INFO, message, fields)


def log_debug(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a DEBUG level message with structured fields.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _log(logging.DEBUG, message, fields)


def log_trace(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a TRACE level message with structured fields.

    Use this for per-entry matching decisions. Disabled unless the
    node_map logger is set to TRACE.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _log(TRACE, message, fields)


def _log(level: int, message: str, fields: dict[str, Any] | LogContext | None) -> None:
    if not logger.isEnabledFor(level):
        return

    fields_dict = _normalize_fields(fields)
    if fields_dict:
        rendered = " ".join(f"{k}={v}" for k, v in fields_dict.items())
        logger.log(level, f"{message} [{rendered}]", extra={"fields": fields_dict})
    else:
        logger.log(level, message, extra={"fields": {}})


def _normalize_fields(
    fields: dict[str, Any] | LogContext | None,
) -> dict[str, str] | None:
    """Normalize fields to a dict of strings.

    Args:
        fields: Input fields as dict, LogContext, or None.

    Returns:
        Dict with string values, or None if no fields.
    """
    if fields is None:
        return None

    if isinstance(fields, LogContext):
        # Convert LogContext to dict, excluding None values
        return {k: str(v) for k, v in fields.model_dump().items() if v is not None}

    return {k: str(v) for k, v in fields.items()}


__all__ = [
    "TRACE",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
]
