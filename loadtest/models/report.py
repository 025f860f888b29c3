"""Derived statistics returned by the metrics accumulator."""

from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class LatencyStats:
    """Summary of one sample set, rounded to two decimals."""

    count: int
    avg: float
    p50: float
    p95: float
    p99: float
    min: float
    max: float


@dataclass(frozen=True)
class ErrorSummary:
    """Error total plus counts grouped by (operation, message)."""

    count: int = 0
    types: dict[tuple[str, str], int] = field(default_factory=dict)


@dataclass(frozen=True)
class AggregatedReport:
    """Snapshot of everything recorded so far."""

    operations: dict[str, LatencyStats]
    propagation: LatencyStats | None
    errors: ErrorSummary
    peak_connections: int
    data_transferred: int

    @property
    def total_operations(self) -> int:
        return sum(stats.count for stats in self.operations.values())

    def to_dict(self) -> dict:
        """JSON-friendly representation."""
        return {
            "operations": {op: asdict(stats) for op, stats in self.operations.items()},
            "listenerPropagation": asdict(self.propagation) if self.propagation else None,
            "errors": {
                "count": self.errors.count,
                "types": {
                    f"{operation}: {message}": count
                    for (operation, message), count in self.errors.types.items()
                },
            },
            "connections": {"peak": self.peak_connections},
            "dataTransferred": self.data_transferred,
        }
