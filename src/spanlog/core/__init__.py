"""Logger/span tree: field merge, prefixes, rendering and enrichment."""

from .enrichers import (
    END_TIMESTAMP_FIELD,
    START_TIMESTAMP_FIELD,
    TIMESTAMP_FIELD,
    EnricherRegistry,
    EventEnricher,
    SpanEnricher,
    span_enricher,
    static_fields_enricher,
    timestamp_enricher,
)
from .errors import InvalidLifecycleTransition, SpanLogError, UnsupportedOperation
from .fields import FieldStore
from .logger import CallShape, Logger, LogCall, create_logger
from .render import MISSING_FIELD_PLACEHOLDER, render_message

__all__ = [
    "Logger",
    "LogCall",
    "CallShape",
    "create_logger",
    "FieldStore",
    "EnricherRegistry",
    "EventEnricher",
    "SpanEnricher",
    "timestamp_enricher",
    "span_enricher",
    "static_fields_enricher",
    "TIMESTAMP_FIELD",
    "START_TIMESTAMP_FIELD",
    "END_TIMESTAMP_FIELD",
    "render_message",
    "MISSING_FIELD_PLACEHOLDER",
    "SpanLogError",
    "InvalidLifecycleTransition",
    "UnsupportedOperation",
]
