"""Fixed-width text rendering of a load-test report."""

import json
from typing import Sequence

from ..models import AggregatedReport, LatencyStats, RunResult, TeamOutcome
from .analysis import Analysis

WIDTH = 72
DIVIDER = "=" * WIDTH
THIN_DIVIDER = "-" * WIDTH
MAX_LISTED_FAILURES = 10

# Workload phases in execution order; anything else is listed after these.
OPERATION_ORDER = [
    "createGame",
    "playerJoin",
    "selectFunctionalRole",
    "startGame",
    "level1_playerSelection",
    "level1_confirmRole",
    "level1_complete",
    "level2_playerUpdate",
    "level2_complete",
    "level3_reportSection",
    "level3_complete",
    "finalRead",
]


def _ordered_operations(report: AggregatedReport) -> list[tuple[str, LatencyStats]]:
    ordered = [(op, report.operations[op]) for op in OPERATION_ORDER if op in report.operations]
    ordered += [
        (op, stats) for op, stats in report.operations.items() if op not in OPERATION_ORDER
    ]
    return ordered


def _operation_row(op: str, stats: LatencyStats) -> str:
    values = (stats.avg, stats.p50, stats.p95, stats.p99, stats.min, stats.max)
    return "  " + op.ljust(28) + str(stats.count).rjust(7) + "".join(
        f"{v:.1f}".rjust(9) for v in values
    )


def _section(title: str) -> list[str]:
    return ["", THIN_DIVIDER, f"  {title}", THIN_DIVIDER]


def render_report(
    report: AggregatedReport,
    analysis: Analysis,
    result: RunResult,
    title: str = "FIREBASE LOAD TEST REPORT - Mission North Star",
) -> str:
    """Render the full human-readable report."""
    lines = ["", DIVIDER, f"  {title}", DIVIDER]

    lines += [
        "",
        "  Test Configuration:",
        f"    Teams:              {result.teams}",
        f"    Players per team:   {result.players}",
        f"    Total connections:  {result.teams * result.players}",
        f"    Total test time:    {result.duration_ms / 1000:.2f}s",
        f"    Teams completed:    {len(result.completed)}",
        f"    Teams failed:       {len(result.failed)}",
        "",
        "  Connection Metrics:",
        f"    Peak connections:   {report.peak_connections}",
        f"    Data transferred:   {report.data_transferred / 1024:.1f} KB (estimated)",
    ]

    lines += _section("WRITE LATENCY BY OPERATION (milliseconds)")
    header = "  " + "Operation".ljust(28) + "Count".rjust(7)
    header += "".join(h.rjust(9) for h in ("Avg", "P50", "P95", "P99", "Min", "Max"))
    lines += [header, "  " + "-" * (WIDTH - 2)]
    lines += [_operation_row(op, stats) for op, stats in _ordered_operations(report)]

    if report.propagation:
        lp = report.propagation
        lines += _section("LISTENER PROPAGATION (milliseconds)")
        lines += [
            f"    Samples:  {lp.count}",
            f"    Avg:      {lp.avg:.1f} ms",
            f"    P50:      {lp.p50:.1f} ms",
            f"    P95:      {lp.p95:.1f} ms",
            f"    P99:      {lp.p99:.1f} ms",
            f"    Min:      {lp.min:.1f} ms",
            f"    Max:      {lp.max:.1f} ms",
        ]

    lines += _section("ERRORS")
    if report.errors.count == 0:
        lines.append("    No errors recorded.")
    else:
        lines.append(f"    Total errors: {report.errors.count}")
        for (operation, message), count in report.errors.types.items():
            lines.append(f"      [{count}x] {operation}: {message}")

    lines += _section("BOTTLENECK ANALYSIS")
    if analysis.bottlenecks:
        lines += [f"    * {b}" for b in analysis.bottlenecks]
    else:
        lines.append("    No significant bottlenecks detected.")

    lines += _section("RECOMMENDATIONS")
    lines += [f"    - {r}" for r in analysis.recommendations]

    lines += ["", DIVIDER, "  END OF REPORT", DIVIDER, ""]
    return "\n".join(lines)


def render_failures(outcomes: Sequence[TeamOutcome]) -> str:
    """List failed teams, truncated after the first few."""
    failed = [o for o in outcomes if not o.success]
    if not failed:
        return ""
    lines = ["  Failed teams:"]
    for outcome in failed[:MAX_LISTED_FAILURES]:
        lines.append(f"    Team {outcome.team_index}: {outcome.error_message}")
    if len(failed) > MAX_LISTED_FAILURES:
        lines.append(f"    ... and {len(failed) - MAX_LISTED_FAILURES} more")
    return "\n".join(lines)


def report_json(report: AggregatedReport, analysis: Analysis, result: RunResult) -> str:
    """Machine-readable export of the same report."""
    payload = {
        "configuration": {
            "teams": result.teams,
            "players": result.players,
            "durationMs": round(result.duration_ms, 2),
            "completedTeams": result.completed,
            "failedTeams": [
                {"team": o.team_index, "error": o.error_message} for o in result.failed
            ],
        },
        "report": report.to_dict(),
        "analysis": {
            "slowestOperation": analysis.slowest_operation,
            "slowestP95": analysis.slowest_p95,
            "errorRatePct": round(analysis.error_rate_pct, 2),
            "bottlenecks": analysis.bottlenecks,
            "recommendations": analysis.recommendations,
        },
    }
    return json.dumps(payload, indent=2)
