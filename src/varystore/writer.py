"""HTTP/1.1 text rendering of stored responses.

Used to dump cache contents for debugging. This is not a wire
implementation: it renders the status line, headers and buffered body of a
response that is already in memory.
"""

from __future__ import annotations

import io
from typing import BinaryIO, Union

import httpx

from varystore.exceptions import PayloadWriteError
from varystore.item import CacheItem

_CRLF = b"\r\n"


def _status_line(response: httpx.Response) -> bytes:
    reason = response.reason_phrase or ""
    return f"HTTP/1.1 {response.status_code} {reason}".rstrip().encode("latin-1")


def _write_headers(stream: BinaryIO, headers: httpx.Headers) -> None:
    lines = [f"{name}: {value}".encode("latin-1") for name, value in headers.multi_items()]
    stream.write(_CRLF.join(lines))
    if lines:
        stream.write(_CRLF)


def _write_body(stream: BinaryIO, response: httpx.Response) -> None:
    stream.write(_CRLF)
    try:
        content = response.content
    except httpx.ResponseNotRead as exc:
        raise PayloadWriteError("Unable to write an unread response body", exc) from exc
    if content:
        stream.write(content)
        stream.write(_CRLF)


def write_response(stream: BinaryIO, response: Union[httpx.Response, CacheItem]) -> None:
    """Write *response* to *stream* as HTTP/1.1 text.

    The header block always ends with exactly one blank line. A response
    without headers renders as the status line followed directly by that
    blank line, with no empty header line.

    Args:
        stream: A binary, writable stream.
        response: A response or a :class:`CacheItem` wrapping one.

    Raises:
        PayloadWriteError: If the stream fails or the body was never read.
    """
    if isinstance(response, CacheItem):
        response = response.response
    try:
        stream.write(_status_line(response))
        stream.write(_CRLF)
        _write_headers(stream, response.headers)
        _write_body(stream, response)
    except OSError as exc:
        raise PayloadWriteError("Unable to write the response", exc) from exc


def format_response(response: Union[httpx.Response, CacheItem]) -> bytes:
    """Render *response* to bytes. See :func:`write_response`."""
    buffer = io.BytesIO()
    write_response(buffer, response)
    return buffer.getvalue()
