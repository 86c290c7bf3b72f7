"""Abstract storage interface consumed by a cache coordinator.

The coordinator decides *whether* a response may be cached and *whether* a
stored one is still fresh; a :class:`CacheStorage` only keeps responses and
finds them again. Storage instances are passed to the coordinator
explicitly, never looked up from module-level state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional, Union

import httpx

from varystore.exceptions import UncacheableResponseError
from varystore.item import CacheItem
from varystore.key import Key, ResourceIdentity


@dataclass(frozen=True)
class StoreResult:
    """Outcome of :meth:`CacheStorage.insert`.

    A response whose body cannot be buffered is an expected outcome, not a
    failure of the storage, so it is reported here rather than raised.
    Callers that prefer an exception use :meth:`unwrap`.

    Example::

        result = storage.insert(request, response)
        if result.ok:
            response = result.response
        else:
            log.info("not cached: %s", result.reason)
    """

    key: Key
    response: Optional[httpx.Response] = None
    reason: Optional[str] = None

    @classmethod
    def stored(cls, key: Key, response: httpx.Response) -> StoreResult:
        return cls(key=key, response=response)

    @classmethod
    def uncacheable(cls, key: Key, reason: str) -> StoreResult:
        return cls(key=key, reason=reason)

    @property
    def ok(self) -> bool:
        return self.response is not None

    def unwrap(self) -> httpx.Response:
        """Return the stored response.

        Raises:
            UncacheableResponseError: If the response was not stored.
        """
        if self.response is None:
            raise UncacheableResponseError(
                self.reason or "Unable to cache response", key=self.key
            )
        return self.response


class CacheStorage(ABC):
    """Contract for storing and retrieving responses by :class:`Key`."""

    @abstractmethod
    def insert(self, request: httpx.Request, response: httpx.Response) -> StoreResult:
        """Buffer and store *response*, replacing the entry at the same key."""

    @abstractmethod
    def update(self, request: httpx.Request, response: httpx.Response) -> httpx.Response:
        """Overwrite the entry at the computed key without buffering."""

    @abstractmethod
    def get(self, lookup: Union[httpx.Request, Key]) -> Optional[CacheItem]:
        """Find the variant matching a request, or the item at an exact key."""

    @abstractmethod
    def invalidate(self, uri: Union[ResourceIdentity, httpx.URL]) -> None:
        """Remove every variant stored for *uri*."""

    @abstractmethod
    def clear(self) -> None:
        """Remove everything."""

    @abstractmethod
    def size(self) -> int:
        """Number of stored variants across all resources."""

    @abstractmethod
    def iterator(self) -> Iterator[Key]:
        """Iterator over a snapshot of all stored keys."""

    def shutdown(self) -> None:
        """Release engine-level resources. Does nothing by default."""

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[Key]:
        return self.iterator()
