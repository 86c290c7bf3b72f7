"""Thread-safe, memory-resident cache storage.

:class:`MemoryCacheStorage` keeps responses in two nested
:class:`~varystore.lru.BoundedLRUMap` levels::

    normalized URI -> BoundedLRUMap[Vary, CacheItem]

The outer map holds at most ``capacity`` resources and each inner map at
most ``vary_capacity`` variants. Storing into a resource (``insert`` or
``update``) marks both the resource and the variant most recent; lookups
never change recency. Evicting a resource drops all of its variants.

One :class:`~varystore.storage.rwlock.ReadWriteLock` guards the whole
structure. Lookups, ``size`` and ``iterator`` take the read lock; ``insert``,
``update``, ``invalidate`` and ``clear`` take the write lock. Payload
buffering in ``insert`` runs before the write lock is taken, so a failing
upstream stream leaves the stored state untouched.

See Also:
    :class:`~varystore.models.StorageConfig` -- the capacity settings.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Optional, Union

import httpx

from varystore.item import CacheItem, ItemFactory
from varystore.key import Key, ResourceIdentity, Vary, normalize_uri
from varystore.lru import BoundedLRUMap
from varystore.models import DEFAULT_CAPACITY, DEFAULT_VARY_CAPACITY, StorageConfig
from varystore.payload import PayloadFactory, buffer_payload, has_payload, with_payload
from varystore.storage.base import CacheStorage, StoreResult
from varystore.storage.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

VaryMap = BoundedLRUMap[Vary, CacheItem]


class MemoryCacheStorage(CacheStorage):
    """In-memory :class:`CacheStorage` with two-level LRU eviction.

    Args:
        capacity: Maximum number of distinct resources (at least 1).
        vary_capacity: Maximum number of variants per resource (at least 1).
        item_factory: Turns a response into the stored :class:`CacheItem`.
        payload_factory: Buffers a response body; returns ``None`` when the
            body cannot be buffered, which makes the response uncacheable.
        on_clear: Called after :meth:`clear` has emptied the storage and
            released the write lock, so it may read the storage.

    Raises:
        pydantic.ValidationError: If a capacity is below 1.

    Example::

        storage = MemoryCacheStorage(capacity=100, vary_capacity=3)
        storage.insert(request, response).unwrap()
        item = storage.get(request)
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        vary_capacity: int = DEFAULT_VARY_CAPACITY,
        *,
        item_factory: ItemFactory = CacheItem.from_response,
        payload_factory: PayloadFactory = buffer_payload,
        on_clear: Optional[Callable[[], None]] = None,
    ) -> None:
        self._config = StorageConfig(capacity=capacity, vary_capacity=vary_capacity)
        self._cache: BoundedLRUMap[ResourceIdentity, VaryMap] = BoundedLRUMap(
            self._config.capacity
        )
        self._lock = ReadWriteLock()
        self._item_factory = item_factory
        self._payload_factory = payload_factory
        self._on_clear = on_clear

    @classmethod
    def from_config(cls, config: StorageConfig, **hooks: Any) -> MemoryCacheStorage:
        """Build a storage from a resolved :class:`StorageConfig`.

        Keyword arguments are passed through as hooks (``item_factory``,
        ``payload_factory``, ``on_clear``).
        """
        return cls(config.capacity, config.vary_capacity, **hooks)

    @property
    def capacity(self) -> int:
        return self._config.capacity

    @property
    def vary_capacity(self) -> int:
        return self._config.vary_capacity

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def insert(self, request: httpx.Request, response: httpx.Response) -> StoreResult:
        """Buffer *response*'s body and store it for *request*.

        The entry previously stored under the same key (same URI and same
        Vary selector) is replaced; other variants of the resource are kept.

        Returns:
            A successful :class:`StoreResult` holding the stored copy of the
            response, or an uncacheable one if the body could not be
            buffered. Nothing is stored in the latter case.
        """
        key = Key.create(request, response)
        cacheable = self._rewrite_response(key, response)
        if cacheable is None:
            return StoreResult.uncacheable(key, f"Unable to buffer payload for {key}")
        item = self._item_factory(cacheable)
        with self._lock.write_locked():
            self._remove_key(key)
            self._put(key, item)
        logger.debug("Stored %s", key)
        return StoreResult.stored(key, cacheable)

    def update(self, request: httpx.Request, response: httpx.Response) -> httpx.Response:
        """Store *response* as-is at its computed key.

        Meant for refreshing the metadata of an already cached response. The
        body is not buffered, and variants under other selectors are left in
        place.
        """
        key = Key.create(request, response)
        item = self._item_factory(response)
        with self._lock.write_locked():
            self._put(key, item)
        logger.debug("Updated %s", key)
        return response

    def invalidate(self, uri: Union[ResourceIdentity, httpx.URL]) -> None:
        """Remove every variant stored for *uri*."""
        identity = normalize_uri(uri)
        with self._lock.write_locked():
            variants = self._cache.get(identity)
            if variants is None:
                return
            for vary in variants.keys():
                self._remove_key(Key(identity, vary))
        logger.debug("Invalidated %s", identity)

    def clear(self) -> None:
        """Remove every resource and variant, then run the ``on_clear`` hook outside the lock."""
        with self._lock.write_locked():
            for identity in self._cache.keys():
                self._cache.remove(identity)
        logger.debug("Cleared storage")
        if self._on_clear is not None:
            self._on_clear()

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def get(self, lookup: Union[httpx.Request, Key]) -> Optional[CacheItem]:
        """Return the stored item for a request or an exact key.

        For a :class:`Key`, only the item stored under exactly that URI and
        selector is returned. For an :class:`httpx.Request`, the variants of
        the request's resource are tried most recently stored first and the
        first one whose selector matches the request wins.

        Returns:
            The :class:`CacheItem`, or ``None`` on a miss.
        """
        if isinstance(lookup, Key):
            return self._get_key(lookup)
        identity = normalize_uri(lookup.url)
        with self._lock.read_locked():
            variants = self._cache.get(identity)
            if variants is None:
                return None
            for vary, item in variants.newest_first():
                if vary.matches(lookup):
                    return item
        return None

    def _get_key(self, key: Key) -> Optional[CacheItem]:
        with self._lock.read_locked():
            variants = self._cache.get(key.uri)
            if variants is None:
                return None
            return variants.get(key.vary)

    def size(self) -> int:
        """Number of stored variants across all resources."""
        with self._lock.read_locked():
            return sum(len(variants) for variants in self._cache.values())

    def iterator(self) -> Iterator[Key]:
        """Iterator over a snapshot of all stored keys.

        Later mutations are not reflected in the returned iterator.
        """
        with self._lock.read_locked():
            keys = frozenset(
                Key(identity, vary)
                for identity, variants in self._cache.items()
                for vary in variants.keys()
            )
        return iter(keys)

    def stats(self) -> dict[str, int]:
        """Return storage statistics.

        Returns:
            A ``dict`` with ``resources`` (distinct URIs), ``size`` (stored
            variants), ``capacity`` and ``vary_capacity``.
        """
        with self._lock.read_locked():
            resources = len(self._cache)
            size = sum(len(variants) for variants in self._cache.values())
        return {
            "resources": resources,
            "size": size,
            "capacity": self._config.capacity,
            "vary_capacity": self._config.vary_capacity,
        }

    def shutdown(self) -> None:
        logger.debug("Shutting down memory storage")

    # ------------------------------------------------------------------ #
    # Internals (callers hold the write lock where noted)
    # ------------------------------------------------------------------ #

    def _rewrite_response(self, key: Key, response: httpx.Response) -> Optional[httpx.Response]:
        """Return the copy of *response* to store, or None if its body cannot be buffered."""
        if not has_payload(response):
            return response
        payload = self._payload_factory(key, response)
        if payload is None or not payload.is_available:
            return None
        return with_payload(response, payload)

    def _put(self, key: Key, item: CacheItem) -> None:
        """Store *item* at *key*. Write lock held."""
        variants = self._cache.get(key.uri)
        if variants is None:
            variants = BoundedLRUMap(self._config.vary_capacity)
        evicted_variant = variants.put(key.vary, item)
        if evicted_variant is not None:
            logger.debug("Evicted variant %s", Key(key.uri, evicted_variant[0]))
        evicted_resource = self._cache.put(key.uri, variants)
        if evicted_resource is not None:
            identity, dropped = evicted_resource
            logger.debug("Evicted %s with %d variants", identity, len(dropped))

    def _remove_key(self, key: Key) -> None:
        """Remove one variant; drop the resource once it has none left. Write lock held."""
        variants = self._cache.get(key.uri)
        if variants is None:
            return
        variants.remove(key.vary)
        if not variants:
            self._cache.remove(key.uri)
