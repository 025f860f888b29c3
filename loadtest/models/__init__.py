"""Core data models for the load-test harness."""

from .metrics import ErrorRecord, Sample
from .outcomes import RunResult, TeamOutcome
from .report import AggregatedReport, ErrorSummary, LatencyStats

__all__ = [
    # Recorded data
    "Sample",
    "ErrorRecord",
    # Team results
    "TeamOutcome",
    "RunResult",
    # Reporting
    "LatencyStats",
    "ErrorSummary",
    "AggregatedReport",
]
