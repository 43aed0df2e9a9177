"""
Enrichment pipeline hooks.

Two kinds of enricher are registered per node and walked root-to-leaf:

- span enrichers run when a child is created, receiving the new child
- event enrichers run on every log() call, receiving the mutable event record,
  the full message template and the emitting node

Enrichers act only through side effects on the value they are handed; they
cannot veto or short-circuit emission.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .logger import Logger

TIMESTAMP_FIELD = "timestamp"
START_TIMESTAMP_FIELD = "startTimestamp"
END_TIMESTAMP_FIELD = "endTimestamp"


class EventEnricher(Protocol):
    def __call__(self, event: dict[str, Any], message_template: str, logger: "Logger") -> None: ...


class SpanEnricher(Protocol):
    def __call__(self, logger: "Logger") -> None: ...


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(UTC).isoformat()


class EnricherRegistry:
    """Append-only enricher lists for one node.

    Lists are allocated on first registration. Traversal always iterates a
    tuple snapshot, so an enricher registering another enricher mid-walk
    does not affect the walk in progress.
    """

    def __init__(self) -> None:
        self._span: list[SpanEnricher] | None = None
        self._event: list[EventEnricher] | None = None

    def add_span_enricher(self, enricher: SpanEnricher) -> None:
        if not callable(enricher):
            raise TypeError(f"span enricher must be callable, got {type(enricher).__name__}")
        if self._span is None:
            self._span = []
        self._span.append(enricher)

    def add_event_enricher(self, enricher: EventEnricher) -> None:
        if not callable(enricher):
            raise TypeError(f"event enricher must be callable, got {type(enricher).__name__}")
        if self._event is None:
            self._event = []
        self._event.append(enricher)

    @property
    def span_enrichers(self) -> tuple[SpanEnricher, ...]:
        return tuple(self._span) if self._span else ()

    @property
    def event_enrichers(self) -> tuple[EventEnricher, ...]:
        return tuple(self._event) if self._event else ()

    def __len__(self) -> int:
        return len(self._span or ()) + len(self._event or ())


def timestamp_enricher(event: dict[str, Any], message_template: str, logger: "Logger") -> None:
    """Stamp the emission time onto every event."""
    event[TIMESTAMP_FIELD] = utc_now_iso()


def span_enricher(logger: "Logger") -> None:
    """Record the creation time of every new span."""
    logger.tag({START_TIMESTAMP_FIELD: utc_now_iso()})


def static_fields_enricher(**fields: Any) -> Callable[[dict[str, Any], str, "Logger"], None]:
    """Build an event enricher that writes fixed fields onto every event.

    Fields already present on the event (from the node chain or the log call)
    are left alone.
    """

    def enrich(event: dict[str, Any], message_template: str, logger: "Logger") -> None:
        for key, value in fields.items():
            event.setdefault(key, value)

    return enrich
