"""
Root logger construction from Settings.
"""

from .config.settings import Settings, get_settings
from .core.enrichers import span_enricher, timestamp_enricher
from .core.logger import Logger, create_logger
from .observability.logging import get_logger, setup_logging
from .observability.metrics import MetricsCollector, metrics_span_enricher
from .observability.tracing import trace_context_enricher
from .sinks import EventSink, MeteredSink, build_sink

logger = get_logger(__name__)

SERVICE_FIELD = "service"


def create_default_logger(
    settings: Settings | None = None,
    sink: EventSink | None = None,
    collector: MetricsCollector | None = None,
) -> Logger:
    """Create a root logger wired according to ``settings``.

    Call once at startup and pass the result by reference. ``sink`` overrides
    the configured sink kind; ``collector`` is used when metrics are enabled.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    sink = sink if sink is not None else build_sink(settings.sink, settings.stream)
    if settings.enable_metrics:
        collector = collector or MetricsCollector()
        sink = MeteredSink(sink, collector)

    root = create_logger(sink=sink)
    if settings.service_name:
        root.tag({SERVICE_FIELD: settings.service_name})
    if settings.enable_trace_context:
        root.add_event_enricher(trace_context_enricher)
    if settings.enable_event_timestamps:
        root.add_event_enricher(timestamp_enricher)
    if settings.enable_span_timestamps:
        root.add_span_enricher(span_enricher)
    if settings.enable_metrics:
        root.add_span_enricher(metrics_span_enricher(collector))

    logger.debug(
        "Root logger created",
        sink=settings.sink,
        metrics=settings.enable_metrics,
        trace_context=settings.enable_trace_context,
    )
    return root
