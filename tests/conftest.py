"""Pytest configuration and fixtures."""

import random
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loadtest.store import StoreError, normalize_path  # noqa: E402


@pytest_asyncio.fixture
async def store():
    """Create in-memory local store for testing."""
    from loadtest.store import SqliteStore

    st = SqliteStore(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def metrics():
    """Create a fresh metrics collector."""
    from loadtest.metrics import MetricsCollector

    return MetricsCollector()


@pytest.fixture
def rng():
    """Seeded random source so workloads are reproducible."""
    return random.Random(1234)


@pytest.fixture
def no_pauses():
    """Workload pauses of zero for fast tests."""
    from loadtest.workload import WorkloadPauses

    return WorkloadPauses(join_min_ms=0, join_max_ms=0, after_start_ms=0, after_level_ms=0)


class FailingStore:
    """Delegates to a real store but raises for calls matching a predicate."""

    def __init__(self, inner: Any, should_fail: Callable[[str, str, Any], bool]):
        self._inner = inner
        self._should_fail = should_fail
        self.failures = 0

    def _check(self, method: str, path: str, payload: Any) -> None:
        if self._should_fail(method, normalize_path(path), payload):
            self.failures += 1
            raise StoreError(f"{method} /{normalize_path(path)} rejected")

    async def init(self) -> None:
        await self._inner.init()

    async def close(self) -> None:
        await self._inner.close()

    async def write(self, path, value):
        self._check("write", path, value)
        await self._inner.write(path, value)

    async def update(self, path, patch):
        self._check("update", path, patch)
        await self._inner.update(path, patch)

    async def read(self, path):
        self._check("read", path, None)
        return await self._inner.read(path)

    def subscribe(self, path, on_change):
        return self._inner.subscribe(path, on_change)


@pytest.fixture
def make_failing_store(store):
    """Factory wrapping the in-memory store with a failure predicate."""

    def factory(should_fail: Callable[[str, str, Any], bool]) -> FailingStore:
        return FailingStore(store, should_fail)

    return factory
