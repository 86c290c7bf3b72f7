"""Configuration resolution for the storage engine.

Capacities are fixed at construction time. They can come from four places,
merged by :func:`resolve_storage_config` with this precedence (high to low):

1. Explicit keyword arguments.
2. Environment variables (``VARYSTORE_CAPACITY``, ``VARYSTORE_VARY_CAPACITY``).
3. A JSON file (``{"capacity": 500, "vary_capacity": 5}``).
4. Defaults from :class:`~varystore.models.StorageConfig`.

Every invalid value surfaces as :class:`~varystore.exceptions.ConfigError`.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from varystore.exceptions import ConfigError
from varystore.models import StorageConfig

ENV_CAPACITY = "VARYSTORE_CAPACITY"
ENV_VARY_CAPACITY = "VARYSTORE_VARY_CAPACITY"

_ENV_FIELDS = {
    "capacity": ENV_CAPACITY,
    "vary_capacity": ENV_VARY_CAPACITY,
}


def _read_config_file(path: str | Path) -> dict[str, Any]:
    """Read a JSON config file into a dict, raising ConfigError on any failure."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
    except OSError as exc:
        raise ConfigError(f"Cannot read storage config at {path}: {exc}") from exc
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid storage config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid storage config at {path}: expected a JSON object")
    return data


def _env_int(name: str) -> Optional[int]:
    """Return the integer value of env var *name*, or None when unset or empty."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def load_storage_config(path: str | Path) -> StorageConfig:
    """Load a :class:`StorageConfig` from a JSON file.

    Args:
        path: Path to a JSON object with ``capacity`` and/or ``vary_capacity``.

    Returns:
        The validated configuration. Missing keys take their defaults.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object, or
            fails validation.
    """
    data = _read_config_file(path)
    try:
        return StorageConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid storage config at {path}: {exc}") from exc


def resolve_storage_config(
    path: Optional[str | Path] = None,
    capacity: Optional[int] = None,
    vary_capacity: Optional[int] = None,
) -> StorageConfig:
    """Resolve storage configuration with the full precedence chain.

    Args:
        path: Optional JSON config file. Ignored when ``None``.
        capacity: Explicit resource capacity; overrides everything else.
        vary_capacity: Explicit per-resource variant capacity; overrides
            everything else.

    Returns:
        The merged and validated :class:`StorageConfig`.

    Raises:
        ConfigError: If any layer supplies an invalid value.
    """
    # 3. File layer
    values: dict[str, Any] = {}
    if path is not None:
        values.update(_read_config_file(path))

    # 2. Environment layer
    for field_name, env_name in _ENV_FIELDS.items():
        env_value = _env_int(env_name)
        if env_value is not None:
            values[field_name] = env_value

    # 1. Explicit arguments
    if capacity is not None:
        values["capacity"] = capacity
    if vary_capacity is not None:
        values["vary_capacity"] = vary_capacity

    try:
        return StorageConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid storage configuration: {exc}") from exc
