"""Exception hierarchy for varystore.

All exceptions inherit from :class:`VarystoreError` so callers can catch
everything raised by the package with a single ``except`` clause.

Subclass hierarchy::

    VarystoreError
    +-- ConfigError
    +-- UncacheableResponseError
    +-- PayloadWriteError

Capacity overflow and cache misses are not errors: the storage evicts
silently and lookups return ``None``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from varystore.key import Key


class VarystoreError(Exception):
    """Base exception for all varystore errors."""


class ConfigError(VarystoreError):
    """Raised for invalid configuration (bad env var, unreadable file, capacity below 1)."""


class UncacheableResponseError(VarystoreError):
    """Raised when a response declares a payload that could not be buffered.

    Only :meth:`~varystore.storage.base.StoreResult.unwrap` raises this;
    :meth:`~varystore.storage.memory.MemoryCacheStorage.insert` itself
    reports the condition through its result value.

    Args:
        message: Human-readable reason.
        key: The cache key the response would have been stored under.
    """

    def __init__(self, message: str, key: Key | None = None):
        super().__init__(message)
        self.key = key


class PayloadWriteError(VarystoreError):
    """Raised when a stored response cannot be written to an output stream."""

    def __init__(self, message: str, cause: Any = None):
        super().__init__(message)
        self.cause = cause
