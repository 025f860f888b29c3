"""Staggered launch of team simulations and the final join."""

import asyncio
import random
import time
from typing import Callable, Protocol

from .. import naming
from ..logging_config import get_logger
from ..metrics import IMetricsCollector
from ..models import RunResult, TeamOutcome
from ..store import IStore
from ..workload import ITeamWorkload, TeamWorkload, WorkloadPauses

logger = get_logger(__name__)


# (team_index, players, rng) -> workload
WorkloadFactory = Callable[[int, int, random.Random], ITeamWorkload]


class IOrchestrator(Protocol):
    """Launches N team simulations and waits for all of them."""

    async def run(self, teams: int, players: int, stagger_ms: float) -> RunResult:
        """Run every team; never fails because a team failed."""
        ...


class Orchestrator:
    """Launches teams into one task group, spaced by a stagger delay.

    Each team task converts its own failure into a ``TeamOutcome`` so the
    group never cancels the remaining teams.
    """

    def __init__(
        self,
        store: IStore,
        metrics: IMetricsCollector,
        rng: random.Random | None = None,
        pauses: WorkloadPauses | None = None,
        workload_factory: WorkloadFactory | None = None,
    ):
        self._store = store
        self._metrics = metrics
        self._rng = rng or random.Random()
        self._pauses = pauses
        self._workload_factory = workload_factory or self._default_workload
        self._settled = 0
        self._ok = 0
        self._failed = 0

    def _default_workload(
        self, team_index: int, players: int, rng: random.Random
    ) -> ITeamWorkload:
        return TeamWorkload(
            store=self._store,
            metrics=self._metrics,
            team_index=team_index,
            players=players,
            rng=rng,
            pauses=self._pauses,
        )

    async def run(self, teams: int, players: int, stagger_ms: float) -> RunResult:
        self._settled = self._ok = self._failed = 0
        start = time.perf_counter()

        tasks: list[asyncio.Task[TeamOutcome]] = []
        async with asyncio.TaskGroup() as group:
            for team_index in range(teams):
                # Per-team generator, seeded in launch order, keeps runs reproducible.
                team_rng = random.Random(self._rng.getrandbits(64))
                workload = self._workload_factory(team_index, players, team_rng)
                tasks.append(
                    group.create_task(
                        self._run_team(team_index, workload, teams),
                        name=f"team-{team_index}",
                    )
                )
                if team_index < teams - 1:
                    await asyncio.sleep(stagger_ms / 1000)

        duration_ms = (time.perf_counter() - start) * 1000
        return RunResult(
            teams=teams,
            players=players,
            duration_ms=duration_ms,
            outcomes=[task.result() for task in tasks],
        )

    async def _run_team(
        self, team_index: int, workload: ITeamWorkload, total: int
    ) -> TeamOutcome:
        team_id = naming.team_id(naming.team_name(team_index))
        try:
            team_id = await workload.run()
        except Exception as e:
            self._metrics.record_error("team_simulation", e)
            outcome = TeamOutcome.failed(team_index, team_id, e)
            self._failed += 1
            logger.warning(
                "Team %s failed: %s",
                team_index,
                outcome.error_message,
                extra={"context": {"team_index": team_index, "team_id": team_id}},
            )
        else:
            outcome = TeamOutcome.succeeded(team_index, team_id)
            self._ok += 1

        self._settled += 1
        logger.info(
            "Progress: %d/%d teams (%.0f%%) | OK: %d | FAIL: %d",
            self._settled,
            total,
            self._settled / total * 100,
            self._ok,
            self._failed,
            extra={"context": {"team_index": team_index, "team_id": team_id}},
        )
        return outcome
