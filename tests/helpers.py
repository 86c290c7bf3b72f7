"""Message and stream builders shared by the test modules.

Builds real :class:`httpx.Request` / :class:`httpx.Response` objects and
byte streams that stream lazily, fail mid-read, or are asynchronous.
"""

from __future__ import annotations

from typing import AsyncIterator, Iterator, Optional

import httpx

BASE_URL = "https://api.example.com"


# ---------------------------------------------------------------------------
# Byte streams
# ---------------------------------------------------------------------------


class ChunkedStream(httpx.SyncByteStream):
    """A single-use stream yielding the given chunks."""

    def __init__(self, *chunks: bytes) -> None:
        self._chunks = chunks
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        yield from self._chunks

    def close(self) -> None:
        self.closed = True


class FailingStream(ChunkedStream):
    """A stream that yields its chunks and then fails like a dropped connection."""

    def __iter__(self) -> Iterator[bytes]:
        yield from self._chunks
        raise OSError("connection reset by peer")


class AsyncChunkedStream(httpx.AsyncByteStream):
    """An async stream, as returned by :class:`httpx.AsyncClient`."""

    def __init__(self, *chunks: bytes) -> None:
        self._chunks = chunks

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk


# ---------------------------------------------------------------------------
# Message builders
# ---------------------------------------------------------------------------


def make_request(path: str = "/users", headers: Optional[dict[str, str]] = None) -> httpx.Request:
    return httpx.Request("GET", f"{BASE_URL}{path}", headers=headers)


def make_response(
    content: bytes = b'{"id": 1}',
    status_code: int = 200,
    vary: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
    request: Optional[httpx.Request] = None,
) -> httpx.Response:
    all_headers = {"content-type": "application/json"}
    if vary is not None:
        all_headers["vary"] = vary
    all_headers.update(headers or {})
    return httpx.Response(
        status_code=status_code,
        headers=all_headers,
        content=content,
        request=request,
    )


def make_streaming_response(
    stream: httpx.SyncByteStream | httpx.AsyncByteStream,
    vary: Optional[str] = None,
) -> httpx.Response:
    headers = {"content-type": "text/plain"}
    if vary is not None:
        headers["vary"] = vary
    return httpx.Response(status_code=200, headers=headers, stream=stream)


