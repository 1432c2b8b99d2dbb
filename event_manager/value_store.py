"""
Event Manager — Value Store
=============================
Ordered key/value bag carried by every Event.

Rules:
- Insertion order is preserved on iteration
- Reading an absent key yields None (never raises)
- Deleting an absent key is a no-op
- append() assigns the next integer key
- Every write is reported to on_set()
"""

from __future__ import annotations

from typing import Any, Hashable, ItemsView, Iterator, Mapping, Optional


class ValueStore:
    """
    Ordered value container with dict-style sugar.

    Subclasses may override on_set() to observe writes.
    """

    def __init__(self, values: Optional[Mapping[Hashable, Any]] = None) -> None:
        self._values: dict[Hashable, Any] = {}
        if values:
            self.set_values(values)

    # ── Accessors ─────────────────────────────────────────────

    def get_value(self, key: Hashable) -> Any:
        return self._values.get(key)

    def has_value(self, key: Hashable) -> bool:
        return key in self._values

    def set_value(self, key: Hashable, value: Any) -> "ValueStore":
        self._values[key] = value
        self.on_set({key: value})
        return self

    def get_values(self) -> dict[Hashable, Any]:
        """Shallow copy of all values, in insertion order."""
        return dict(self._values)

    def set_values(self, values: Mapping[Hashable, Any]) -> "ValueStore":
        """Replace the entire contents."""
        self._values = dict(values)
        self.on_set(dict(self._values))
        return self

    def append(self, value: Any) -> int:
        """Store value under the next free integer key and return that key."""
        key = self._next_index()
        self._values[key] = value
        self.on_set({key: value})
        return key

    def items(self) -> ItemsView[Hashable, Any]:
        return self._values.items()

    def on_set(self, values: dict[Hashable, Any]) -> None:
        """Called with the values just written. No-op by default."""

    def _next_index(self) -> int:
        int_keys = [
            k for k in self._values
            if isinstance(k, int) and not isinstance(k, bool)
        ]
        return max(int_keys) + 1 if int_keys else 0

    # ── Mapping sugar ─────────────────────────────────────────

    def __getitem__(self, key: Hashable) -> Any:
        return self.get_value(key)

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self.set_value(key, value)

    def __delitem__(self, key: Hashable) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[Hashable]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)
