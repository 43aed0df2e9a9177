"""
Observability plumbing around the span tree.

- logging: spanlog's own diagnostics on stdlib ``logging``
- tracing: correlation with the current OpenTelemetry span
- metrics: OpenTelemetry counters for emitted events and created spans

Only the logging helpers are re-exported here; ``sinks`` depends on them, and
the tracing bridge depends on ``sinks``.
"""

from .logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
