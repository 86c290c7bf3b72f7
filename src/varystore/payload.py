"""Buffering response bodies into re-readable memory.

A response arriving from the network carries a single-use byte stream.
Before it can be stored, :func:`buffer_payload` reads that stream completely
into a :class:`Payload`, and :func:`with_payload` builds the copy of the
response that the storage keeps. Buffering happens outside the storage lock,
so a slow or failing upstream never blocks other callers.

:func:`buffer_payload` is the default ``payload_factory`` of
:class:`~varystore.storage.MemoryCacheStorage`; any callable with the same
signature can replace it (for example to refuse bodies above a size limit).
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

import httpx

if TYPE_CHECKING:
    from varystore.key import Key

logger = logging.getLogger(__name__)

PayloadFactory = Callable[["Key", httpx.Response], Optional["Payload"]]

# Headers describing the wire framing of the original body. The buffered
# bytes are already decoded, so these no longer apply.
_FRAMING_HEADERS = ("content-encoding", "transfer-encoding")


@dataclass(frozen=True)
class Payload:
    """A fully buffered response body.

    Args:
        data: The decoded body bytes.
        mime_type: Value of the response's ``Content-Type`` header, if any.
    """

    data: bytes
    mime_type: Optional[str] = None

    @property
    def is_available(self) -> bool:
        """Buffered payloads can always be read again."""
        return True

    def open(self) -> io.BytesIO:
        """Return a fresh binary stream over the buffered bytes."""
        return io.BytesIO(self.data)

    def __len__(self) -> int:
        return len(self.data)


def has_payload(response: httpx.Response) -> bool:
    """Return True if *response* carries a body that must be buffered.

    Informational, ``204 No Content`` and ``304 Not Modified`` responses
    never have one. An unread stream is assumed to have one.
    """
    status = response.status_code
    if status < 200 or status in (204, 304):
        return False
    try:
        return bool(response.content)
    except httpx.ResponseNotRead:
        return True


def buffer_payload(key: Key, response: httpx.Response) -> Optional[Payload]:
    """Read the whole body of *response* into memory.

    A response that was already read (including one read with
    ``await response.aread()``) is used as-is. An unread async stream cannot
    be consumed synchronously and is reported as unbufferable.

    Returns:
        The buffered :class:`Payload`, or ``None`` if the stream could not
        be read to the end (already consumed, closed, failing, or async).
    """
    try:
        return Payload(response.content, response.headers.get("content-type"))
    except httpx.ResponseNotRead:
        pass
    if not isinstance(response.stream, httpx.SyncByteStream):
        logger.warning("Unable to buffer payload for %s: unread async stream", key)
        return None
    try:
        data = response.read()
    except (httpx.StreamError, httpx.RequestError, OSError) as exc:
        logger.warning("Unable to buffer payload for %s: %s", key, exc)
        return None
    finally:
        response.close()
    return Payload(data, response.headers.get("content-type"))


def _request_of(response: httpx.Response) -> Optional[httpx.Request]:
    try:
        return response.request
    except RuntimeError:
        return None


def with_payload(response: httpx.Response, payload: Payload) -> httpx.Response:
    """Return a copy of *response* whose body is the buffered *payload*."""
    headers = response.headers.copy()
    for name in _FRAMING_HEADERS:
        if name in headers:
            del headers[name]
    headers["content-length"] = str(len(payload))
    return httpx.Response(
        status_code=response.status_code,
        headers=headers,
        content=payload.data,
        request=_request_of(response),
        extensions=dict(response.extensions),
    )
