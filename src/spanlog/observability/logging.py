"""
Diagnostic logging for spanlog itself, on top of the stdlib ``logging`` module.

Span trees produce *events* for an EventSink; this module is for the library's
own operational messages and for the ``LoggingSink`` bridge.
"""

import logging
import sys
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

# Global logger cache
_loggers: dict[str, "StructuredLogger"] = {}

# LogRecord attributes that cannot be passed through ``extra``
RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
        "asctime",
    }
)


class StructuredFormatter(logging.Formatter):
    """Single-line key=value formatter."""

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        mod = parts[-1] if parts else record.name

        timestamp = datetime.fromtimestamp(record.created, UTC).isoformat()
        msg = record.getMessage()

        extra_fields = "".join(
            f" {key}={value}"
            for key, value in record.__dict__.items()
            if key not in RESERVED_ATTRS and not key.startswith("_")
        )
        line = f't={timestamp} level={record.levelname} mod={mod} msg="{msg}"{extra_fields}'
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


RENAMED_FIELD_PREFIX = "field_"


def safe_extra(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Make ``fields`` usable as ``extra`` without losing any of them.

    Keys that collide with LogRecord attributes are renamed with
    ``RENAMED_FIELD_PREFIX``; LogRecord raises KeyError on the originals.
    """
    extra: dict[str, Any] = {}
    for key, value in fields.items():
        if key in RESERVED_ATTRS:
            key = RENAMED_FIELD_PREFIX + key
            while key in fields or key in extra:
                key = RENAMED_FIELD_PREFIX + key
        extra[key] = value
    return extra


class StructuredLogger:
    """Thin wrapper turning keyword arguments into structured ``extra`` fields."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

    def log(self, level: int, msg: str, extra: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        """Log ``msg`` with ``extra`` and ``kwargs`` as structured fields.

        Pass arbitrary user data through ``extra``; its keys may include names
        such as ``msg`` or ``level`` that cannot be keyword arguments here.
        """
        fields = dict(extra or {})
        fields.update(kwargs)
        self.logger.log(level, msg, extra=safe_extra(fields))

    def debug(self, msg: str, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, **kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        self.log(logging.CRITICAL, msg, **kwargs)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for the given module."""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name)
    return _loggers[name]


def setup_logging(level: str = "INFO", stream=None) -> logging.Handler:
    """Attach a structured handler to the ``spanlog`` logger hierarchy."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())

    package_logger = logging.getLogger("spanlog")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper()))
    return handler
