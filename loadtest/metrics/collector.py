"""Append-only metrics accumulator shared by every team simulation."""

import math
import threading
from datetime import datetime, timezone
from typing import Protocol, Sequence

from ..models import AggregatedReport, ErrorRecord, ErrorSummary, LatencyStats, Sample

# Callbacks slower than this are initial-subscription fires, not propagation.
PROPAGATION_CEILING_MS = 30_000


def percentile(samples: Sequence[float], p: float) -> float:
    """Nearest-rank percentile; 0 for an empty sample set."""
    if not samples:
        return 0
    ordered = sorted(samples)
    idx = math.ceil(p / 100 * len(ordered)) - 1
    idx = min(max(idx, 0), len(ordered) - 1)
    return ordered[idx]


def _summarize(values: Sequence[float]) -> LatencyStats:
    return LatencyStats(
        count=len(values),
        avg=round(sum(values) / len(values), 2),
        p50=round(percentile(values, 50), 2),
        p95=round(percentile(values, 95), 2),
        p99=round(percentile(values, 99), 2),
        min=round(min(values), 2),
        max=round(max(values), 2),
    )


class IMetricsCollector(Protocol):
    """Process-lifetime store of latencies, errors and connection gauges."""

    def record_latency(self, operation: str, elapsed_ms: float) -> None:
        """Append a latency sample to the operation's bucket."""
        ...

    def record_error(self, operation: str, error: BaseException) -> None:
        """Append an error record."""
        ...

    def record_listener_propagation(self, elapsed_ms: float) -> None:
        """Append a propagation sample if below the ceiling."""
        ...

    def connection_opened(self) -> None:
        ...

    def connection_closed(self) -> None:
        ...

    def add_data_transferred(self, byte_count: int) -> None:
        ...

    def get_report(self) -> AggregatedReport:
        """Return a statistics snapshot."""
        ...


class MetricsCollector:
    """Lock-guarded metrics accumulator.

    Every mutation bumps an internal version; ``get_report`` reuses the last
    snapshot while the version is unchanged.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._samples: dict[str, list[Sample]] = {}
        self._errors: list[ErrorRecord] = []
        self._propagations: list[float] = []
        self._data_transferred = 0
        self._current_connections = 0
        self._peak_connections = 0
        self._version = 0
        self._cached: tuple[int, AggregatedReport] | None = None

    def record_latency(self, operation: str, elapsed_ms: float) -> None:
        sample = Sample(operation, elapsed_ms, datetime.now(timezone.utc))
        with self._lock:
            self._samples.setdefault(operation, []).append(sample)
            self._version += 1

    def record_error(self, operation: str, error: BaseException) -> None:
        message = str(error) or type(error).__name__
        record = ErrorRecord(operation, message, datetime.now(timezone.utc))
        with self._lock:
            self._errors.append(record)
            self._version += 1

    def record_listener_propagation(self, elapsed_ms: float) -> None:
        if elapsed_ms >= PROPAGATION_CEILING_MS:
            return
        with self._lock:
            self._propagations.append(elapsed_ms)
            self._version += 1

    def connection_opened(self) -> None:
        with self._lock:
            self._current_connections += 1
            self._peak_connections = max(self._peak_connections, self._current_connections)
            self._version += 1

    def connection_closed(self) -> None:
        with self._lock:
            self._current_connections -= 1
            self._version += 1

    def add_data_transferred(self, byte_count: int) -> None:
        with self._lock:
            self._data_transferred += byte_count
            self._version += 1

    @property
    def current_connections(self) -> int:
        return self._current_connections

    @property
    def peak_connections(self) -> int:
        return max(self._peak_connections, 0)

    def get_report(self) -> AggregatedReport:
        with self._lock:
            if self._cached is not None and self._cached[0] == self._version:
                return self._cached[1]
            version = self._version
            buckets = {
                op: [s.elapsed_ms for s in samples] for op, samples in self._samples.items()
            }
            errors = list(self._errors)
            propagations = list(self._propagations)
            peak = max(self._peak_connections, 0)
            data_transferred = self._data_transferred

        types: dict[tuple[str, str], int] = {}
        for err in errors:
            key = (err.operation, err.message)
            types[key] = types.get(key, 0) + 1

        report = AggregatedReport(
            operations={op: _summarize(values) for op, values in buckets.items()},
            propagation=_summarize(propagations) if propagations else None,
            errors=ErrorSummary(count=len(errors), types=types),
            peak_connections=peak,
            data_transferred=data_transferred,
        )

        with self._lock:
            if self._version == version:
                self._cached = (version, report)
        return report
