"""The stored record for one cache key."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import httpx

from varystore.payload import Payload


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheItem:
    """A response as it was stored, plus the time it was stored.

    Items are created by the storage's ``item_factory`` and replaced, never
    modified, when the same key is stored again. Callers should treat the
    wrapped :class:`httpx.Response` as read-only; :attr:`headers` returns a
    copy for that reason.
    """

    response: httpx.Response
    cached_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_response(cls, response: httpx.Response) -> CacheItem:
        """Default item factory: wrap *response* stamped with the current UTC time."""
        return cls(response)

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers.copy()

    @property
    def payload(self) -> Optional[Payload]:
        """The stored body, or ``None`` if the response has none or was stored unread."""
        try:
            content = self.response.content
        except httpx.ResponseNotRead:
            return None
        if not content:
            return None
        return Payload(content, self.response.headers.get("content-type"))

    @property
    def age(self) -> timedelta:
        """Time elapsed since the item was stored."""
        return _utcnow() - self.cached_at


ItemFactory = Callable[[httpx.Response], CacheItem]
