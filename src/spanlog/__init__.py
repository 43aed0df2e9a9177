"""
spanlog - hierarchical structured logging where every logger is also a span.

A tree of logger nodes in which each node inherits fields, message prefixes and
enrichers from its ancestors, and every ``log()`` call produces one flat,
fully merged event record for an EventSink.

Quick Start:
    >>> from spanlog import create_logger, timestamp_enricher
    >>>
    >>> root = create_logger()  # one JSON line per event on stdout
    >>> root.add_event_enricher(timestamp_enricher)
    >>>
    >>> request = root.child({"requestId": "abc123"})
    >>> job = request.child(jobId=7).prefix("Processing job {jobId}: ")
    >>> job.log("finished in state {state}", {"state": "done"})
    {"requestId": "abc123", "jobId": 7, "state": "done", "timestamp": "...",
     "message": "Processing job 7: finished in state done"}

Spans:
    >>> with request.span("load-accounts") as span:
    ...     span.log("loading")
    >>> # span now carries an endTimestamp field

Configuration:
    ``create_default_logger()`` builds a root from environment settings:
    - SPANLOG_SINK=json|logging|memory
    - SPANLOG_SERVICE_NAME=billing
    - SPANLOG_ENABLE_TRACE_CONTEXT=true (OpenTelemetry trace/span IDs on events)
    - SPANLOG_ENABLE_METRICS=true (OpenTelemetry counters)
"""

__version__ = "0.1.0"

from .config.settings import Settings, get_settings
from .core import (
    END_TIMESTAMP_FIELD,
    START_TIMESTAMP_FIELD,
    TIMESTAMP_FIELD,
    CallShape,
    InvalidLifecycleTransition,
    Logger,
    SpanLogError,
    UnsupportedOperation,
    create_logger,
    render_message,
    span_enricher,
    static_fields_enricher,
    timestamp_enricher,
)
from .factory import create_default_logger
from .sinks import EventSink, JsonStreamSink, LoggingSink, MemorySink, MeteredSink

__all__ = [
    "Logger",
    "CallShape",
    "create_logger",
    "create_default_logger",
    "render_message",
    "timestamp_enricher",
    "span_enricher",
    "static_fields_enricher",
    "TIMESTAMP_FIELD",
    "START_TIMESTAMP_FIELD",
    "END_TIMESTAMP_FIELD",
    "EventSink",
    "JsonStreamSink",
    "LoggingSink",
    "MemorySink",
    "MeteredSink",
    "Settings",
    "get_settings",
    "SpanLogError",
    "InvalidLifecycleTransition",
    "UnsupportedOperation",
]
