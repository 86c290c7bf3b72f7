"""varystore -- in-memory storage engine for an HTTP response cache.

This package keeps :class:`httpx.Response` objects in memory keyed by the
normalized request URI and the request headers named by the response's
``Vary`` header. Memory is bounded by two nested LRU levels: the number of
resources, and the number of variants kept per resource. All operations are
safe to call from multiple threads.

Typical usage::

    from varystore import MemoryCacheStorage

    storage = MemoryCacheStorage(capacity=500, vary_capacity=5)
    result = storage.insert(request, response)
    if result.ok:
        item = storage.get(request)

Freshness decisions (``max-age``, validators, conditional requests) are left
to the caller; this package only stores and retrieves.

Modules:
    lru: The bounded LRU mapping used at both storage levels.
    key: Resource identity normalization, Vary selectors and cache keys.
    payload: Buffering response bodies into re-readable memory.
    item: The stored record handed back to callers.
    storage: The storage interface and its in-memory implementation.
    config: Configuration resolution from arguments, environment and files.
    writer: HTTP/1.1 text rendering of stored responses.
"""

from varystore.exceptions import (
    ConfigError,
    PayloadWriteError,
    UncacheableResponseError,
    VarystoreError,
)
from varystore.item import CacheItem
from varystore.key import Key, Vary, normalize_uri
from varystore.lru import BoundedLRUMap
from varystore.models import StorageConfig
from varystore.payload import Payload
from varystore.storage import CacheStorage, MemoryCacheStorage, StoreResult
from varystore.writer import format_response, write_response

__version__ = "0.1.0"

__all__ = [
    "BoundedLRUMap",
    "CacheItem",
    "CacheStorage",
    "ConfigError",
    "Key",
    "MemoryCacheStorage",
    "Payload",
    "PayloadWriteError",
    "StorageConfig",
    "StoreResult",
    "UncacheableResponseError",
    "Vary",
    "VarystoreError",
    "format_response",
    "normalize_uri",
    "write_response",
]
