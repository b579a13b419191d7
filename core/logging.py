# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with run context
# PURPOSE: Consistent, queryable logging across all health components
# CREATED: 18 OCT 2026
# ============================================================================
"""
Structured Logging

Component loggers that stamp every record with the active run context
(run_id, check_id, site, operation). Context lives in a ContextVar, so
checks running as concurrent asyncio tasks each see their own values.

Output:
- Human-readable lines in development
- One JSON object per line when json_output=True or LOG_FORMAT=json

Usage:
    from core.logging import ComponentType, get_logger, log_context

    logger = get_logger(__name__, ComponentType.RUNNER)

    with log_context(run_id="a1b2c3d4", operation="check"):
        logger.info("Running 3 checks", extra={"budget_ms": 5000})
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union


class ComponentType(str, Enum):
    """Engine components, used to categorize log records."""
    RUNNER = "runner"
    AUTH = "auth"
    CACHE = "cache"
    SANITIZER = "sanitizer"
    CHECK = "check"
    API = "api"


# Chatty third-party loggers (httpx logs every request at INFO)
QUIET_LOGGERS = ("httpx", "httpcore")


@dataclass(frozen=True)
class LogContext:
    """Fields attached to every record logged inside a log_context block."""
    run_id: Optional[str] = None
    check_id: Optional[str] = None
    site: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, with `extra` flattened in."""
        result = {
            key: value
            for key, value in (
                ("run_id", self.run_id),
                ("check_id", self.check_id),
                ("site", self.site),
                ("operation", self.operation),
            )
            if value is not None
        }
        result.update(self.extra)
        return result


_current_context: ContextVar[LogContext] = ContextVar("health_log_context", default=LogContext())


def get_current_context() -> LogContext:
    """Context of the current task."""
    return _current_context.get()


@contextmanager
def log_context(**fields):
    """
    Layer fields over the current context for the duration of the block.

    Unknown keyword arguments go into `extra`.

    Example:
        with log_context(run_id=run_id, check_id="build"):
            logger.info("Check finished")
    """
    parent = get_current_context()
    known = {k: fields.pop(k) for k in ("run_id", "check_id", "site", "operation") if k in fields}
    context = replace(parent, extra={**parent.extra, **fields}, **known)

    token = _current_context.set(context)
    try:
        yield context
    finally:
        _current_context.reset(token)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        data = dict(getattr(record, "data", None) or {})
        component = data.pop("component", None)

        entry: Dict[str, Any] = {
            "timestamp": _utc_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if component:
            entry["component"] = component

        context = get_current_context().to_dict()
        if context:
            entry["context"] = context
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line format for development consoles."""

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        tags = [
            f"{label}={value}"
            for label, value in (
                ("run", context.run_id),
                ("check", context.check_id),
                ("site", context.site),
            )
            if value
        ]
        data = {
            k: v
            for k, v in (getattr(record, "data", None) or {}).items()
            if k != "component" and k not in context.to_dict()
        }

        line = (
            f"{datetime.now(timezone.utc):%H:%M:%S} {record.levelname:<8} {record.name}"
            f"{' [' + ' '.join(tags) + ']' if tags else ''}: {record.getMessage()}"
            f"{' ' + str(data) if data else ''}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Adapter that moves caller `extra` and the component into record.data.

    Keeping everything under one attribute avoids collisions with
    LogRecord's own fields (name, message, ...).
    """

    def process(self, msg, kwargs):
        data = dict(kwargs.get("extra") or {})
        component = self.extra.get("component") if self.extra else None
        if component is not None:
            data.setdefault("component", component.value)
        kwargs["extra"] = {"data": data}
        return msg, kwargs


def get_logger(name: str, component: Optional[ComponentType] = None) -> ContextLogger:
    """Context-aware logger for a module."""
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(
    level: Union[str, int, None] = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Log level name or number (LOG_LEVEL env, default INFO)
        json_output: JSON lines instead of human format (LOG_FORMAT=json)
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    if json_output is None:
        json_output = os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if json_output else HumanFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


# ============================================================================
# CHECKPOINT LOGGING
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
) -> None:
    """
    Log a named marker ("health_run_completed", "budget_exceeded").

    Checkpoints share one message prefix so a run can be reconstructed
    by filtering on it plus the run_id.
    """
    target = logger if logger is not None else get_logger("checkpoint")
    payload = {"checkpoint": name, **(data or {})}
    if isinstance(target, ContextLogger):
        target.info(f"CHECKPOINT: {name}", extra=payload)
    else:
        target.info(f"CHECKPOINT: {name}", extra={"data": payload})


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
