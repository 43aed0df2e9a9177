"""
Error taxonomy for the logger/span tree.
"""


class SpanLogError(Exception):
    """Base class for all spanlog errors."""


class InvalidLifecycleTransition(SpanLogError, RuntimeError):
    """Raised when finish() is called on a span that is already finished."""


class UnsupportedOperation(SpanLogError, NotImplementedError):
    """Raised for call shapes that are recognised but not implemented."""
