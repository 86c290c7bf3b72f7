"""Fixed-capacity mapping with least-recently-stored eviction.

:class:`BoundedLRUMap` is the container used at both levels of
:class:`~varystore.storage.MemoryCacheStorage`: resources in the outer map,
variants in each inner map.

Recency is refreshed by :meth:`BoundedLRUMap.put` only. :meth:`get` never
reorders entries, so eviction depends solely on the order in which entries
were last stored. The map is not thread-safe on its own; the storage guards
it with its read/write lock.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Generic, Iterator, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class BoundedLRUMap(Generic[K, V]):
    """Mapping that holds at most ``capacity`` entries.

    Args:
        capacity: Maximum number of entries, at least 1.

    Raises:
        ValueError: If ``capacity`` is below 1.

    Example::

        lru = BoundedLRUMap(2)
        lru.put("a", 1)
        lru.put("b", 2)
        lru.put("c", 3)  # evicts "a"
        assert lru.keys() == ["b", "c"]
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def put(self, key: K, value: V) -> Optional[tuple[K, V]]:
        """Insert or replace *key* and mark it most recent.

        Returns:
            The evicted ``(key, value)`` pair when the insertion pushed the
            map over capacity, otherwise ``None``.
        """
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = value
        if len(self._entries) > self._capacity:
            return self._entries.popitem(last=False)
        return None

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Return the value for *key* without touching its recency."""
        return self._entries.get(key, default)

    def remove(self, key: K) -> Optional[V]:
        """Delete *key* if present and return its value."""
        return self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[K]:
        """Snapshot of the keys, least recent first."""
        return list(self._entries.keys())

    def values(self) -> list[V]:
        """Snapshot of the values, least recent first."""
        return list(self._entries.values())

    def items(self) -> list[tuple[K, V]]:
        """Snapshot of the entries, least recent first."""
        return list(self._entries.items())

    def newest_first(self) -> list[tuple[K, V]]:
        """Snapshot of the entries, most recent first."""
        return list(reversed(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"BoundedLRUMap(capacity={self._capacity}, size={len(self._entries)})"
