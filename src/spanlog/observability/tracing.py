"""
OpenTelemetry bridge.

Correlates spanlog events with whatever OpenTelemetry span is current in this
process. Nothing here serializes or propagates context across processes.
"""

from typing import TYPE_CHECKING, Any

from opentelemetry import trace

from ..sinks import MESSAGE_KEY, EventSink

if TYPE_CHECKING:
    from ..core.logger import Logger

TRACE_ID_FIELD = "traceId"
SPAN_ID_FIELD = "spanId"

_PRIMITIVES = (str, bool, int, float)


def get_current_ids() -> tuple[str, str] | None:
    """Hex trace and span IDs of the current OpenTelemetry span, if it is valid."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x"), format(span_context.span_id, "016x")


def trace_context_enricher(event: dict[str, Any], message_template: str, logger: "Logger") -> None:
    """Event enricher stamping the current OpenTelemetry trace and span IDs."""
    ids = get_current_ids()
    if ids is None:
        return
    event[TRACE_ID_FIELD], event[SPAN_ID_FIELD] = ids


def _to_attribute(value: Any) -> Any:
    if isinstance(value, _PRIMITIVES):
        return value
    return str(value)


class SpanEventSink:
    """Record each event on the current OpenTelemetry span, then delegate."""

    name = "otel"

    def __init__(self, inner: EventSink | None = None):
        self.inner = inner

    def emit(self, record: dict[str, Any]) -> None:
        current_span = trace.get_current_span()
        if current_span.is_recording():
            attributes = {
                key: _to_attribute(value)
                for key, value in record.items()
                if key != MESSAGE_KEY and value is not None
            }
            current_span.add_event(record.get(MESSAGE_KEY) or "log", attributes)
        if self.inner is not None:
            self.inner.emit(record)
