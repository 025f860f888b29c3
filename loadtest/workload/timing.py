"""Timing and size helpers used by the team workload."""

import json
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from ..metrics import IMetricsCollector


def now_ms() -> int:
    """Wall-clock epoch milliseconds, as stored in game records."""
    return int(time.time() * 1000)


def estimate_bytes(obj: Any) -> int:
    """UTF-8 size of the compact JSON encoding."""
    return len(json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))


@asynccontextmanager
async def timed(metrics: IMetricsCollector, operation: str) -> AsyncIterator[None]:
    """Record the latency of the enclosed block; record and re-raise failures."""
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        metrics.record_latency(operation, (time.perf_counter() - start) * 1000)
        metrics.record_error(operation, e)
        raise
    metrics.record_latency(operation, (time.perf_counter() - start) * 1000)
