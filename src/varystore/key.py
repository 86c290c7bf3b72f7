"""Cache keys: resource identity plus content-negotiation selector.

A stored response is identified by a :class:`Key` made of two parts:

* the **resource identity**, a normalized URI string produced by
  :func:`normalize_uri`, and
* a :class:`Vary` selector recording the values the request carried for
  every header the response listed in its ``Vary`` header.

:meth:`Key.create` is the only place a selector is computed from live
messages. Everywhere else a :class:`Vary` is opaque data carried by a key,
compared with :meth:`Vary.matches` when looking up a later request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

import httpx

ResourceIdentity = str

_WILDCARD = "*"


def normalize_uri(url: str | httpx.URL) -> ResourceIdentity:
    """Return the normalized identity of *url*.

    :class:`httpx.URL` lowercases scheme and host, drops default ports and
    removes dot segments. The fragment is never sent to a server, so it is
    dropped here too.
    """
    if not isinstance(url, httpx.URL):
        url = httpx.URL(url)
    return str(url).split("#", 1)[0]


def _header_value(headers: httpx.Headers, name: str) -> Optional[str]:
    values = headers.get_list(name)
    if not values:
        return None
    return ", ".join(value.strip() for value in values)


@dataclass(frozen=True)
class Vary:
    """Header name/value pairs that select one variant of a resource.

    Pairs are kept sorted by name so two selectors built from the same
    headers in a different order compare and hash equal. A value of ``None``
    records that the request did not send the header.
    """

    headers: tuple[tuple[str, Optional[str]], ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, **headers: Optional[str]) -> Vary:
        """Build a selector from keyword arguments (underscores become dashes).

        Example::

            Vary.of(accept_language="en")
        """
        pairs = {name.replace("_", "-").lower(): value for name, value in headers.items()}
        return cls(tuple(sorted(pairs.items())))

    @classmethod
    def from_exchange(cls, request: httpx.Request, response: httpx.Response) -> Vary:
        """Record the request's values for every header named in ``response``'s Vary."""
        names = {
            name.lower()
            for name in response.headers.get_list("vary", split_commas=True)
            if name
        }
        pairs = []
        for name in sorted(names):
            if name == _WILDCARD:
                pairs.append((name, None))
            else:
                pairs.append((name, _header_value(request.headers, name)))
        return cls(tuple(pairs))

    def matches(self, request: httpx.Request) -> bool:
        """Return True if *request* carries exactly the recorded header values.

        A header absent from both the selector's request and *request*
        matches. A ``Vary: *`` selector never matches; such variants are
        reachable only through their exact :class:`Key`.
        """
        for name, value in self.headers:
            if name == _WILDCARD:
                return False
            if _header_value(request.headers, name) != value:
                return False
        return True

    def as_dict(self) -> dict[str, Optional[str]]:
        return dict(self.headers)

    def __len__(self) -> int:
        return len(self.headers)

    def __iter__(self) -> Iterator[tuple[str, Optional[str]]]:
        return iter(self.headers)


@dataclass(frozen=True)
class Key:
    """Identity of one stored representation: ``(uri, vary)``."""

    uri: ResourceIdentity
    vary: Vary = field(default_factory=Vary)

    @classmethod
    def create(cls, request: httpx.Request, response: httpx.Response) -> Key:
        """Derive the key a response to *request* is stored under."""
        return cls(normalize_uri(request.url), Vary.from_exchange(request, response))

    @classmethod
    def for_request(cls, request: httpx.Request) -> Key:
        """Partial key for lookups: the request's identity with an empty selector."""
        return cls(normalize_uri(request.url))

    def __str__(self) -> str:
        if not self.vary:
            return self.uri
        selector = ", ".join(f"{name}={value}" for name, value in self.vary)
        return f"{self.uri} [{selector}]"
