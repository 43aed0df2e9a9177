"""
Per-node field storage.
"""

from collections.abc import Mapping
from typing import Any


class FieldStore:
    """Lazily allocated key/value map owned by a single logger node.

    The backing dict is created on first write, so the many short-lived
    nodes that never tag anything carry no mapping at all.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] | None = None

    def update(self, fields: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        """Merge ``fields`` then ``kwargs`` into the store, last write wins."""
        if not fields and not kwargs:
            return
        if self._data is None:
            self._data = {}
        if fields:
            self._data.update(fields)
        if kwargs:
            self._data.update(kwargs)

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of the current fields."""
        return dict(self._data) if self._data else {}

    def merge_into(self, target: dict[str, Any]) -> dict[str, Any]:
        if self._data:
            target.update(self._data)
        return target

    @property
    def allocated(self) -> bool:
        return self._data is not None

    def __len__(self) -> int:
        return len(self._data) if self._data else 0

    def __repr__(self) -> str:
        return f"FieldStore({self._data or {}!r})"
