"""Pydantic configuration model for the storage engine.

:class:`StorageConfig` is the single source of truth for construction-time
settings. It is produced by :func:`varystore.config.resolve_storage_config`
and consumed by :meth:`varystore.storage.MemoryCacheStorage.from_config`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CAPACITY = 1000
DEFAULT_VARY_CAPACITY = 10


class StorageConfig(BaseModel):
    """Capacity settings for :class:`~varystore.storage.MemoryCacheStorage`.

    Both limits are entry counts, not byte sizes. Exceeding either one
    evicts the least recently stored entry at that level.

    Example::

        StorageConfig(capacity=200, vary_capacity=4)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    capacity: int = Field(
        default=DEFAULT_CAPACITY,
        ge=1,
        description="Maximum number of distinct resources kept",
    )
    vary_capacity: int = Field(
        default=DEFAULT_VARY_CAPACITY,
        ge=1,
        description="Maximum number of variants kept per resource",
    )
