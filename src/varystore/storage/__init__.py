"""Cache storage interface and its in-memory implementation.

:class:`CacheStorage` is the contract a cache coordinator depends on;
:class:`MemoryCacheStorage` is the thread-safe, memory-resident
implementation. :class:`StoreResult` reports the outcome of an insert.
"""

from varystore.storage.base import CacheStorage, StoreResult
from varystore.storage.memory import MemoryCacheStorage
from varystore.storage.rwlock import ReadWriteLock

__all__ = ["CacheStorage", "MemoryCacheStorage", "ReadWriteLock", "StoreResult"]
