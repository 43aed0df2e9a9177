"""
The logger/span tree.

A ``Logger`` is a node in a tree. Each node owns a small amount of state (its
own fields, a message prefix fragment, a single-use message template and its
enrichers) and reads everything else from its ancestors at call time:

- effective fields are the root's fields overridden by each descendant's own
  fields down to this node, then by the per-call overrides of ``log()``
- the effective message prefix is every prefix fragment from the root down
- span enrichers of every ancestor run against each newly created child
- event enrichers of every ancestor run against each emitted event

Nothing is cached, so a field tagged on a parent is visible to children that
already exist. Parents hold no references to their children.

Usage:
    >>> root = create_logger(sink=MemorySink())
    >>> request = root.child({"requestId": "r-1"}).prefix("[{requestId}] ")
    >>> request.message("loaded {count} rows").log({"count": 3})

A node may be read from many call paths at once, but its own fields, prefix and
pending message must not be written concurrently without external locking.
Give each concurrent path its own child instead.
"""

import functools
import inspect
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from ..sinks import MESSAGE_KEY, EventSink, JsonStreamSink
from .enrichers import END_TIMESTAMP_FIELD, EnricherRegistry, EventEnricher, SpanEnricher, utc_now_iso
from .errors import InvalidLifecycleTransition, UnsupportedOperation
from .fields import FieldStore
from .render import render_message

T = TypeVar("T")

SPAN_NAME_FIELD = "spanName"
ERROR_FIELD = "error"
ERROR_TYPE_FIELD = "errorType"

# Resolves sys.stdout at emit time
_DEFAULT_SINK = JsonStreamSink()


class CallShape(Enum):
    """Argument shapes accepted by ``Logger.log``."""

    EMPTY = "empty"
    MESSAGE = "message"
    MESSAGE_AND_FIELDS = "message_and_fields"
    FIELDS_ONLY = "fields_only"


@dataclass(frozen=True)
class LogCall:
    """A ``log()`` call resolved to one shape at the API boundary."""

    shape: CallShape
    message: str | None = None
    fields: dict[str, Any] | None = None

    @classmethod
    def resolve(cls, args: tuple, kwargs: Mapping[str, Any]) -> "LogCall":
        if len(args) > 2:
            raise TypeError(f"log() takes at most 2 positional arguments ({len(args)} given)")

        message: str | None = None
        fields: Mapping[str, Any] | None = None

        if len(args) == 2:
            message, fields = args
            if message is not None and not isinstance(message, str):
                raise TypeError(f"log() message must be a string, got {type(message).__name__}")
        elif len(args) == 1:
            if isinstance(args[0], str):
                message = args[0]
            elif args[0] is None or isinstance(args[0], Mapping):
                fields = args[0]
            else:
                raise TypeError(
                    f"log() expects a message string or a field mapping, got {type(args[0]).__name__}"
                )

        if fields is not None and not isinstance(fields, Mapping):
            raise TypeError(f"log() fields must be a mapping, got {type(fields).__name__}")

        merged = _merge_arguments(fields, kwargs)
        if message is None:
            shape = CallShape.EMPTY if merged is None else CallShape.FIELDS_ONLY
        else:
            shape = CallShape.MESSAGE if merged is None else CallShape.MESSAGE_AND_FIELDS
        return cls(shape=shape, message=message, fields=merged)


def _merge_arguments(fields: Mapping[str, Any] | None, kwargs: Mapping[str, Any]) -> dict[str, Any] | None:
    if fields is None and not kwargs:
        return None
    merged = dict(fields or {})
    merged.update(kwargs)
    return merged


class Logger:
    """A structured logger, or a tracing span, depending how you want to think about it.

    Not intended for subclassing.
    """

    def __init__(self, parent: "Logger | None" = None, sink: EventSink | None = None):
        self._parent = parent
        self._sink = sink
        self._fields = FieldStore()
        self._prefix = ""
        self._message = ""
        self._finished = False
        self._enrichers = EnricherRegistry()

    # -- tree ---------------------------------------------------------------

    @property
    def parent(self) -> "Logger | None":
        return self._parent

    @property
    def depth(self) -> int:
        """Number of ancestors; 0 for a root."""
        depth = 0
        node = self._parent
        while node is not None:
            depth += 1
            node = node._parent
        return depth

    def lineage(self) -> list["Logger"]:
        """This node and its ancestors, root first."""
        chain = []
        node: Logger | None = self
        while node is not None:
            chain.append(node)
            node = node._parent
        chain.reverse()
        return chain

    @property
    def sink(self) -> EventSink:
        """The nearest sink on the path to the root."""
        node: Logger | None = self
        while node is not None:
            if node._sink is not None:
                return node._sink
            node = node._parent
        return _DEFAULT_SINK

    # -- own state ----------------------------------------------------------

    @property
    def fields(self) -> dict[str, Any]:
        """Copy of the fields set on this node only."""
        return self._fields.snapshot()

    @property
    def own_prefix(self) -> str:
        return self._prefix

    @property
    def pending_message(self) -> str:
        return self._message

    @property
    def finished(self) -> bool:
        return self._finished

    def declare(self, fields_type: type | None = None) -> "Logger":
        """Declare but do not set logging fields.

        Has no runtime effect; ``fields_type`` (e.g. a TypedDict) documents the
        semantic conventions of a root logger for readers and type checkers.
        """
        return self

    def tag(self, fields: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "Logger":
        """Add fields that will be emitted with every event from this node and its children."""
        self._fields.update(fields, **kwargs)
        return self

    def set(self, fields: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "Logger":
        """Set values of known fields, following the declared conventions."""
        return self.tag(fields, **kwargs)

    def add(self, fields: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "Logger":
        """Add free-form key/value pairs that need not match declared fields."""
        return self.tag(fields, **kwargs)

    def prefix(self, fragment: str) -> "Logger":
        """Append to this node's message prefix. Applies to every later event here and below."""
        self._prefix += fragment
        return self

    def message(self, template: str) -> "Logger":
        """Set the template for the next ``log()`` call on this node only.

            logger.message("update {job_id}").log({"job_id": 123})
        """
        self._message = template
        return self

    def add_span_enricher(self, enricher: SpanEnricher) -> "Logger":
        self._enrichers.add_span_enricher(enricher)
        return self

    def add_event_enricher(self, enricher: EventEnricher) -> "Logger":
        self._enrichers.add_event_enricher(enricher)
        return self

    # -- merged views -------------------------------------------------------

    def merged_fields(self, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Fields from the root down to this node, then ``overrides``; last write wins."""
        return self._merge(self.lineage(), overrides)

    def full_prefix(self) -> str:
        return "".join(node._prefix for node in self.lineage())

    def full_message(self, message: str | None = None) -> str:
        """Accumulated prefix followed by ``message``, or the pending message if None."""
        return self.full_prefix() + (self._message if message is None else message)

    @staticmethod
    def _merge(lineage: list["Logger"], overrides: Mapping[str, Any] | None) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for node in lineage:
            node._fields.merge_into(merged)
        if overrides:
            merged.update(overrides)
        return merged

    # -- emission -----------------------------------------------------------

    def log(self, *args: Any, **kwargs: Any) -> dict[str, Any]:
        """Create and emit one event.

        Accepted shapes::

            log()
            log("template {x}")
            log("template {x}", {"x": 1})
            log({"x": 1})
            log("template {x}", x=1)

        The pending message is consumed by every call, including calls that
        pass their own message. Returns a copy of the record handed to the sink.
        """
        try:
            call = LogCall.resolve(args, kwargs)
            return self._emit(call.message, call.fields)
        finally:
            self._message = ""

    def _emit(self, message: str | None, overrides: Mapping[str, Any] | None) -> dict[str, Any]:
        lineage = self.lineage()
        event = self._merge(lineage, overrides)
        template = "".join(node._prefix for node in lineage) + (
            self._message if message is None else message
        )

        for node in lineage:
            for enricher in node._enrichers.event_enrichers:
                enricher(event, template, self)

        event[MESSAGE_KEY] = render_message(template, event)
        self.sink.emit(event)
        return dict(event)

    # -- children and spans -------------------------------------------------

    def child(self, *args: Any, **kwargs: Any) -> "Logger":
        """Create a child logger, optionally adding fields to it right away.

        Span enrichers of this node and every ancestor run against the child,
        root first, before the initial fields are applied.
        """
        if args and isinstance(args[0], str):
            raise UnsupportedOperation(
                "placing child logger fields on a sub-object is not implemented yet"
            )
        if len(args) > 1:
            raise TypeError(f"child() takes at most 1 positional argument ({len(args)} given)")
        fields = args[0] if args else None
        if fields is not None and not isinstance(fields, Mapping):
            raise TypeError(f"child() fields must be a mapping, got {type(fields).__name__}")

        child = Logger(parent=self)
        for node in self.lineage():
            for enricher in node._enrichers.span_enrichers:
                enricher(child)
        child._fields.update(fields, **kwargs)
        return child

    def finish(self, fields: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "Logger":
        """Mark this span finished, writing ``endTimestamp`` to its fields.

        Does not emit an event and does not touch children. Logging after
        finish is allowed; finishing twice is not.
        """
        if self._finished:
            raise InvalidLifecycleTransition("span is already finished")
        self._finished = True
        self._fields.update({END_TIMESTAMP_FIELD: utc_now_iso()})
        self._fields.update(fields, **kwargs)
        return self

    def start_span(self, name: str, fields: Mapping[str, Any] | None = None, /, **kwargs: Any) -> "Logger":
        """Create a child tagged with an operation name."""
        if not isinstance(name, str) or not name:
            raise ValueError("span name must be a non-empty string")
        span = self.child(fields, **kwargs)
        span.tag({SPAN_NAME_FIELD: name})
        return span

    @contextmanager
    def span(self, name: str, fields: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Iterator["Logger"]:
        """Context manager around ``start_span``; the span is finished on exit.

        An exception escaping the block is tagged onto the span and re-raised.
        """
        span = self.start_span(name, fields, **kwargs)
        try:
            yield span
        except Exception as e:
            span.tag({ERROR_FIELD: True, ERROR_TYPE_FIELD: type(e).__name__})
            raise
        finally:
            if not span.finished:
                span.finish()

    def with_child(self, func: Callable[..., T]) -> Callable[..., T]:
        """Wrap ``func(logger, *args)`` so each call receives a fresh child."""
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                return await func(self.child(), *args, **kwargs)

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            return func(self.child(), *args, **kwargs)

        return sync_wrapper

    def do_with_child(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Invoke ``func`` now, passing a fresh child as the first argument."""
        return func(self.child(), *args, **kwargs)

    def map_with_child(self, items: Iterable[Any], func: Callable[["Logger", Any], T]) -> list[T]:
        """Like ``map`` but each item gets its own child logger."""
        return [func(self.child(), item) for item in items]

    def __repr__(self) -> str:
        state = "finished" if self._finished else "open"
        return f"<Logger depth={self.depth} fields={len(self._fields)} {state}>"


def create_logger(sink: EventSink | None = None) -> Logger:
    """Create a root logger.

    Construct the process root once at startup and pass it by reference.
    """
    return Logger(sink=sink)
