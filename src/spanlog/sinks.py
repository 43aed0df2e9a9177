"""
Event sinks: where finished event records go.

A sink receives one flat ``dict`` per ``Logger.log()`` call, already merged,
enriched and rendered, and is responsible for serialization and transport.
"""

import json
import logging
import sys
from typing import IO, TYPE_CHECKING, Any, Protocol, runtime_checkable

from .observability.logging import get_logger

if TYPE_CHECKING:
    from .observability.metrics import MetricsCollector

MESSAGE_KEY = "message"
LEVEL_KEY = "level"


@runtime_checkable
class EventSink(Protocol):
    def emit(self, record: dict[str, Any]) -> None: ...


class JsonStreamSink:
    """Write each record as one JSON line."""

    name = "json"

    def __init__(self, stream: IO[str] | None = None):
        # None means "sys.stdout at emit time"
        self._stream = stream

    @property
    def stream(self) -> IO[str]:
        return self._stream if self._stream is not None else sys.stdout

    def emit(self, record: dict[str, Any]) -> None:
        stream = self.stream
        stream.write(json.dumps(record, default=str) + "\n")
        stream.flush()


class LoggingSink:
    """Forward records to a stdlib logger as structured ``extra`` fields.

    An optional ``level`` field picks the log level and is kept as a field.
    """

    name = "logging"

    def __init__(self, logger_name: str = "spanlog.events", default_level: int = logging.INFO):
        self.logger = get_logger(logger_name)
        self.default_level = default_level

    def _level_for(self, record: dict[str, Any]) -> int:
        level = record.get(LEVEL_KEY)
        if isinstance(level, int) and not isinstance(level, bool):
            return level
        if isinstance(level, str):
            resolved = logging.getLevelName(level.upper())
            if isinstance(resolved, int):
                return resolved
        return self.default_level

    def emit(self, record: dict[str, Any]) -> None:
        # Fields named like LogRecord attributes arrive renamed, e.g. ``name`` -> ``field_name``
        fields = {k: v for k, v in record.items() if k != MESSAGE_KEY}
        self.logger.log(self._level_for(record), record.get(MESSAGE_KEY, ""), extra=fields)


class MemorySink:
    """Keep records in memory."""

    name = "memory"

    def __init__(self):
        self.records: list[dict[str, Any]] = []

    def emit(self, record: dict[str, Any]) -> None:
        self.records.append(record)

    @property
    def messages(self) -> list[str]:
        return [record.get(MESSAGE_KEY, "") for record in self.records]

    def clear(self) -> None:
        self.records.clear()

    def __len__(self) -> int:
        return len(self.records)


class MeteredSink:
    """Count each record in a MetricsCollector, then delegate."""

    def __init__(self, inner: EventSink, collector: "MetricsCollector"):
        self.inner = inner
        self.collector = collector
        self.name = getattr(inner, "name", type(inner).__name__)

    def emit(self, record: dict[str, Any]) -> None:
        self.collector.record_event(self.name)
        self.inner.emit(record)


def build_sink(kind: str, stream: str = "stdout") -> EventSink:
    """Create a sink from its configuration name."""
    if kind == "json":
        return JsonStreamSink(sys.stderr if stream == "stderr" else None)
    if kind == "logging":
        return LoggingSink()
    if kind == "memory":
        return MemorySink()
    raise ValueError(f"Unknown sink kind: {kind!r}")
