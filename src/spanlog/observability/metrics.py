"""
OpenTelemetry metrics for event emission and span creation.

Uses the OpenTelemetry metrics API; without a configured MeterProvider the
instruments are no-ops and only the local tallies are kept.
"""

from collections import defaultdict
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Meter

from .logging import get_logger

if TYPE_CHECKING:
    from ..core.logger import Logger

logger = get_logger(__name__)

METER_NAME = "spanlog"


class MetricsCollector:
    """Counts emitted events and created spans."""

    def __init__(self, meter: Meter | None = None):
        self.meter = meter or metrics.get_meter(METER_NAME)
        self._counters: dict[str, Counter] = {}

        self._events_by_sink: defaultdict[str, int] = defaultdict(int)
        self._spans_by_depth: defaultdict[int, int] = defaultdict(int)

        self._setup_default_metrics()

    def _setup_default_metrics(self) -> None:
        self._counters["events_emitted_total"] = self.meter.create_counter(
            "spanlog_events_emitted_total", description="Events handed to a sink", unit="1"
        )
        self._counters["spans_created_total"] = self.meter.create_counter(
            "spanlog_spans_created_total", description="Child spans created", unit="1"
        )

    def record_event(self, sink_name: str) -> None:
        self._counters["events_emitted_total"].add(1, {"sink": sink_name})
        self._events_by_sink[sink_name] += 1

    def record_span(self, depth: int) -> None:
        self._counters["spans_created_total"].add(1, {"depth": depth})
        self._spans_by_depth[depth] += 1

    def get_summary(self) -> dict[str, Any]:
        """Local tallies, independent of any exporter."""
        return {
            "events_emitted": sum(self._events_by_sink.values()),
            "events_by_sink": dict(self._events_by_sink),
            "spans_created": sum(self._spans_by_depth.values()),
            "spans_by_depth": dict(self._spans_by_depth),
        }

    def reset(self) -> None:
        self._events_by_sink.clear()
        self._spans_by_depth.clear()
        logger.debug("Metrics tallies reset")


def metrics_span_enricher(collector: MetricsCollector):
    """Build a span enricher that counts every child created below its node."""

    def enrich(span: "Logger") -> None:
        collector.record_span(span.depth)

    return enrich
