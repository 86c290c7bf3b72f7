"""Shared test fixtures for varystore.

These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports. Message builders live in
``tests/helpers.py``.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from varystore.storage import MemoryCacheStorage


@pytest.fixture()
def storage() -> Iterator[MemoryCacheStorage]:
    """A storage holding at most 3 resources with 2 variants each."""
    s = MemoryCacheStorage(capacity=3, vary_capacity=2)
    yield s
    s.shutdown()
