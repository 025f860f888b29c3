"""Application bootstrap and lifecycle management."""

import os
import random
from typing import Literal, Protocol

from .cleanup import CleanupManager, CleanupResult
from .config import FirebaseSettings, RunSettings, Thresholds
from .logging_config import get_logger
from .metrics import MetricsCollector
from .models import AggregatedReport, RunResult
from .orchestrator import Orchestrator
from .report import Analysis, analyze
from .store import FirebaseStore, IStore, SqliteStore
from .workload import WorkloadPauses

logger = get_logger(__name__)

Backend = Literal["firebase", "local"]


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...


class Application:
    """Wires store, metrics, orchestrator and cleanup together."""

    def __init__(
        self,
        backend: Backend = "firebase",
        firebase_settings: FirebaseSettings | None = None,
        db_path: str | None = None,
        thresholds: Thresholds | None = None,
        pauses: WorkloadPauses | None = None,
        store: IStore | None = None,
    ):
        self._backend = backend
        self._firebase_settings = firebase_settings
        self._db_path = os.getenv("LOADTEST_DB_PATH") if db_path is None else db_path
        self._thresholds = thresholds or Thresholds()
        self._pauses = pauses
        self._injected_store = store

        # Components (will be initialized in start())
        self._store: IStore | None = None
        self._metrics: MetricsCollector | None = None

    def _create_store(self) -> IStore:
        if self._injected_store is not None:
            return self._injected_store
        if self._backend == "local":
            return SqliteStore(self._db_path)
        settings = self._firebase_settings or FirebaseSettings.from_env()
        return FirebaseStore(settings)

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.debug("Starting application (%s backend)", self._backend)

        # 1. Store (no dependencies)
        self._store = self._create_store()
        await self._store.init()

        # 2. Metrics (no dependencies)
        self._metrics = MetricsCollector()

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._store:
            await self._store.close()
            self._store = None
            logger.debug("Store closed")

    async def run_load_test(self, settings: RunSettings) -> RunResult:
        """Run every team and wait until all of them settle."""
        orchestrator = Orchestrator(
            store=self.store,
            metrics=self.metrics,
            rng=random.Random(settings.seed),
            pauses=self._pauses,
        )
        logger.info(
            "Configuration: %d teams x %d players = %d total connections",
            settings.teams,
            settings.players,
            settings.teams * settings.players,
        )
        logger.info("Stagger: %dms between team starts", settings.stagger_ms)
        return await orchestrator.run(settings.teams, settings.players, settings.stagger_ms)

    def build_report(self, teams: int, players: int) -> tuple[AggregatedReport, Analysis]:
        report = self.metrics.get_report()
        return report, analyze(report, self._thresholds, teams, players)

    async def cleanup(self) -> CleanupResult:
        """Remove generated test data; never raises."""
        return await CleanupManager(self.store).cleanup()

    @property
    def store(self) -> IStore:
        """Get store instance."""
        if not self._store:
            raise RuntimeError("Application not started")
        return self._store

    @property
    def metrics(self) -> MetricsCollector:
        """Get metrics collector instance."""
        if not self._metrics:
            raise RuntimeError("Application not started")
        return self._metrics
