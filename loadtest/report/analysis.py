"""Threshold-driven bottleneck detection and recommendations."""

from dataclasses import dataclass, field

from ..config import Thresholds
from ..models import AggregatedReport


@dataclass
class Analysis:
    """Heuristic findings derived from one report."""

    slowest_operation: str | None = None
    slowest_p95: float = 0.0
    error_rate_pct: float = 0.0
    bottlenecks: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


def analyze(
    report: AggregatedReport,
    thresholds: Thresholds | None = None,
    teams: int = 0,
    players: int = 0,
) -> Analysis:
    """Flag bottlenecks and build recommendations for a report."""
    limits = thresholds or Thresholds()
    analysis = Analysis()

    # Highest non-zero p95 wins; ties keep the first operation seen.
    for op, stats in report.operations.items():
        if stats.p95 > analysis.slowest_p95:
            analysis.slowest_operation = op
            analysis.slowest_p95 = stats.p95
    if analysis.slowest_operation is not None:
        analysis.bottlenecks.append(
            f'Slowest operation (P95): "{analysis.slowest_operation}" '
            f"at {analysis.slowest_p95:.1f}ms"
        )

    for op, stats in report.operations.items():
        if (
            stats.count > limits.high_variance_min_count
            and stats.p99 > stats.p50 * limits.high_variance_ratio
        ):
            ratio = stats.p99 / stats.p50 if stats.p50 else float("inf")
            analysis.bottlenecks.append(
                f'High variance: "{op}" P99 ({stats.p99:.1f}ms) is {ratio:.1f}x '
                f"the P50 ({stats.p50:.1f}ms)"
            )

    propagation_p95 = report.propagation.p95 if report.propagation else None
    if propagation_p95 is not None and propagation_p95 > limits.propagation_p95_bottleneck_ms:
        analysis.bottlenecks.append(
            f"Listener propagation P95 ({propagation_p95:.1f}ms) exceeds "
            f"{limits.propagation_p95_bottleneck_ms:.0f}ms threshold"
        )

    total_ops = report.total_operations
    if total_ops > 0:
        analysis.error_rate_pct = report.errors.count / total_ops * 100
    if analysis.error_rate_pct > limits.error_rate_pct:
        analysis.bottlenecks.append(
            f"Error rate {analysis.error_rate_pct:.2f}% exceeds "
            f"{limits.error_rate_pct:g}% threshold "
            f"({report.errors.count} errors in {total_ops} operations)"
        )

    recs = analysis.recommendations
    if analysis.slowest_p95 > limits.slow_p95_critical_ms:
        recs.append(
            f"CRITICAL: P95 latency exceeds {limits.slow_p95_critical_ms:.0f}ms. "
            "Consider enabling Firebase connection multiplexing or reducing write "
            "granularity."
        )
    if analysis.slowest_p95 > limits.slow_p95_warning_ms:
        recs.append(
            f"WARNING: P95 latency exceeds {limits.slow_p95_warning_ms:.0f}ms. "
            "Consider batching writes with multi-path updates to reduce round trips."
        )
    if report.errors.count > 0:
        recs.append(
            f"Address {report.errors.count} errors. Common causes: rate limiting, "
            "network timeouts, or security rules rejecting writes."
        )
    if report.peak_connections > limits.peak_connections:
        recs.append(
            f"Peak concurrent connections ({report.peak_connections}) is high. "
            "Firebase Realtime Database allows 200K concurrent connections on "
            "Blaze plan. Ensure your plan supports this."
        )
    if propagation_p95 is not None and propagation_p95 > limits.propagation_p95_recommend_ms:
        recs.append(
            "Listener propagation is slow. Consider using more granular "
            "subscriptions (e.g., subscribe to specific paths rather than the "
            "whole game object)."
        )
    if report.data_transferred > limits.data_transferred_bytes:
        recs.append(
            f"High data transfer ({report.data_transferred / (1024 * 1024):.1f}MB). "
            "Consider restructuring data to reduce payload sizes."
        )

    recs.append(
        "Consider using Firebase security rules to limit read/write sizes and "
        "prevent abuse."
    )
    recs.append(
        "For production, enable Firebase App Check to prevent unauthorized access."
    )

    if teams >= limits.capacity_teams and players >= limits.capacity_players:
        recs.append(
            f"At {limits.capacity_teams * limits.capacity_players}+ connections, "
            "monitor Firebase dashboard for concurrent connection limits and "
            "bandwidth quotas."
        )

    return analysis
