"""Load-generation and measurement harness for a real-time data store."""

from .app import Application, IApplication
from .cleanup import CleanupManager, CleanupResult
from .config import ConfigError, FirebaseSettings, RunSettings, Thresholds
from .metrics import IMetricsCollector, MetricsCollector, percentile
from .models import (
    AggregatedReport,
    ErrorRecord,
    ErrorSummary,
    LatencyStats,
    RunResult,
    Sample,
    TeamOutcome,
)
from .orchestrator import IOrchestrator, Orchestrator
from .report import Analysis, analyze, render_failures, render_report
from .store import FirebaseStore, IStore, Snapshot, SqliteStore, StoreError
from .workload import TeamWorkload, WorkloadPauses

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Config
    "ConfigError",
    "FirebaseSettings",
    "RunSettings",
    "Thresholds",
    # Models
    "Sample",
    "ErrorRecord",
    "TeamOutcome",
    "RunResult",
    "LatencyStats",
    "ErrorSummary",
    "AggregatedReport",
    # Components
    "IMetricsCollector",
    "MetricsCollector",
    "percentile",
    "IStore",
    "Snapshot",
    "StoreError",
    "SqliteStore",
    "FirebaseStore",
    "TeamWorkload",
    "WorkloadPauses",
    "IOrchestrator",
    "Orchestrator",
    "Analysis",
    "analyze",
    "render_report",
    "render_failures",
    "CleanupManager",
    "CleanupResult",
]
