"""Scripted workload of one simulated team."""

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Protocol

from .. import naming
from ..logging_config import get_logger
from ..metrics import IMetricsCollector
from ..store import IStore, Snapshot, Unsubscribe
from .game_state import (
    BADGES,
    CRITERIA_BY_ROLE,
    FUNCTIONAL_ROLES,
    REPORT_SECTIONS,
    SAMPLING_STEPS,
    create_initial_game_state,
    player_record,
    report_parts,
)
from .timing import estimate_bytes, now_ms, timed

logger = get_logger(__name__)


@dataclass(frozen=True)
class WorkloadPauses:
    """Think-time pauses between phases, in milliseconds."""

    join_min_ms: float = 20.0
    join_max_ms: float = 50.0
    after_start_ms: float = 100.0
    after_level_ms: float = 50.0


class PropagationProbe:
    """Measures write-to-callback delay on the commander's subscription.

    ``arm`` is called right before a write expected to fire the callback;
    the next callback consumes the pending instant.
    """

    def __init__(self, metrics: IMetricsCollector):
        self._metrics = metrics
        self._armed_at: float | None = None
        self.calls = 0

    @property
    def armed(self) -> bool:
        return self._armed_at is not None

    def arm(self) -> None:
        self._armed_at = time.perf_counter()

    def on_change(self, snapshot: Snapshot) -> None:
        self.calls += 1
        if self._armed_at is None:
            return
        elapsed_ms = (time.perf_counter() - self._armed_at) * 1000
        self._armed_at = None
        self._metrics.record_listener_propagation(elapsed_ms)


class ITeamWorkload(Protocol):
    """One team's scripted session against the store."""

    async def run(self) -> str:
        """Execute every phase; return the team id."""
        ...


class TeamWorkload:
    """Commander plus crew playing one game from creation to final read."""

    def __init__(
        self,
        store: IStore,
        metrics: IMetricsCollector,
        team_index: int,
        players: int,
        rng: random.Random | None = None,
        pauses: WorkloadPauses | None = None,
    ):
        if players < 1:
            raise ValueError("A team needs at least one player")
        self._store = store
        self._metrics = metrics
        self._rng = rng or random.Random()
        self._pauses = pauses or WorkloadPauses()

        self.team_index = team_index
        self.team_name = naming.team_name(team_index)
        self.team_id = naming.team_id(self.team_name)
        self.commander_id = naming.player_id(team_index, 0)
        self.crew_ids = [naming.player_id(team_index, i) for i in range(1, players)]
        self.player_ids = [self.commander_id, *self.crew_ids]

        self.probe = PropagationProbe(metrics)
        self.role_assignments: dict[str, str] = {}
        self._unsubscribes: list[Unsubscribe] = []
        self._open_connections = 0
        self._scores: dict[int, int] = {}

    def _path(self, *parts: str) -> str:
        return naming.team_path(self.team_id, *parts)

    def _open_connection(self) -> None:
        self._metrics.connection_opened()
        self._open_connections += 1

    async def _pause(self, ms: float) -> None:
        await asyncio.sleep(ms / 1000)

    async def run(self) -> str:
        """Execute every phase; the first failure aborts the rest."""
        self._open_connection()  # commander
        try:
            await self._create_game()
            self._subscribe_commander()
            await self._join_crew()
            await self._assign_roles()
            await self._start_game()
            await self._level1()
            await self._level2()
            await self._level3()
            await self._final_read()
        finally:
            self._teardown()
        logger.debug("Team %s finished", self.team_id)
        return self.team_id

    async def _create_game(self) -> None:
        game_state = create_initial_game_state(self.team_id, self.team_name)
        game_state["players"][self.commander_id] = player_record("commander")
        self._metrics.add_data_transferred(estimate_bytes(game_state))

        async with timed(self._metrics, "createGame"):
            await self._store.write(self._path(), game_state)

    def _subscribe_commander(self) -> None:
        self._unsubscribes.append(self._store.subscribe(self._path(), self.probe.on_change))

    async def _join_crew(self) -> None:
        for i, crew_id in enumerate(self.crew_ids):
            self._open_connection()

            record = player_record("crew")
            self._metrics.add_data_transferred(estimate_bytes(record))
            async with timed(self._metrics, "playerJoin"):
                await self._store.write(self._path("players", crew_id), record)

            self._unsubscribes.append(self._store.subscribe(self._path(), lambda _snapshot: None))

            if i < len(self.crew_ids) - 1:
                await self._pause(
                    self._rng.uniform(self._pauses.join_min_ms, self._pauses.join_max_ms)
                )

    async def _assign_roles(self) -> None:
        for i, pid in enumerate(self.player_ids):
            role = FUNCTIONAL_ROLES[i % len(FUNCTIONAL_ROLES)]
            self.role_assignments[pid] = role

            data = {"functionalRole": role, "lastActive": now_ms()}
            self._metrics.add_data_transferred(estimate_bytes(data))
            async with timed(self._metrics, "selectFunctionalRole"):
                await self._store.update(self._path("players", pid), data)

    async def _start_game(self) -> None:
        self.probe.arm()
        data = {"gameStarted": True}
        self._metrics.add_data_transferred(estimate_bytes(data))
        async with timed(self._metrics, "startGame"):
            await self._store.update(self._path("meta"), data)

        # Let subscriptions fire
        await self._pause(self._pauses.after_start_ms)

    def _pick(self, role: str, count: int = 3) -> list[str]:
        return self._rng.sample(CRITERIA_BY_ROLE[role], count)

    async def _level1(self) -> None:
        for pid in self.player_ids:
            role = self.role_assignments[pid]
            selected = self._pick(role)
            self._metrics.add_data_transferred(estimate_bytes(selected))
            async with timed(self._metrics, "level1_playerSelection"):
                await self._store.write(
                    self._path("level1", "roleSelections", role, "playerSelections", pid),
                    selected,
                )

        for role in FUNCTIONAL_ROLES:
            criteria = self._pick(role)
            confirmed_by = [pid for pid in self.player_ids if self.role_assignments[pid] == role]
            self._metrics.add_data_transferred(
                estimate_bytes({"confirmedSelections": criteria, "confirmedBy": confirmed_by})
            )
            selection_path = self._path("level1", "roleSelections", role)
            updates = {
                f"{selection_path}/confirmedSelections": criteria,
                f"{selection_path}/confirmedBy": confirmed_by,
            }
            async with timed(self._metrics, "level1_confirmRole"):
                await self._store.update("", updates)

        selected_criteria = [c for role in FUNCTIONAL_ROLES for c in self._pick(role)]
        self._scores[1] = self._rng.randint(500, 999)
        complete = {
            "selectedCriteria": selected_criteria,
            "score": self._scores[1],
            "completedAt": now_ms(),
        }
        self._metrics.add_data_transferred(estimate_bytes(complete))

        self.probe.arm()
        async with timed(self._metrics, "level1_complete"):
            await self._store.update(self._path("level1"), complete)
            await self._store.update(
                self._path("meta"),
                {"currentLevel": 2, "highestUnlockedLevel": 2, "totalScore": self._scores[1]},
            )

        await self._pause(self._pauses.after_level_ms)

    async def _level2(self) -> None:
        sampling_plan = {
            "sampleSize": self._rng.randint(10, 59),
            "samplingMethod": "stratified",
            "steps": SAMPLING_STEPS,
            "totalSampleCost": self._rng.randint(50, 249),
            "budget": 300,
            "confirmedBy": self.player_ids[:3],
        }

        for i, pid in enumerate(self.player_ids[:5]):
            step_update = {f"step_{i}_assignee": pid, f"step_{i}_confirmed": True}
            self._metrics.add_data_transferred(estimate_bytes(step_update))
            async with timed(self._metrics, "level2_playerUpdate"):
                await self._store.update(self._path("level2", "samplingPlan"), step_update)

        self._scores[2] = self._rng.randint(300, 699)
        complete = {
            "samplingPlan": sampling_plan,
            "score": self._scores[2],
            "completedAt": now_ms(),
        }
        self._metrics.add_data_transferred(estimate_bytes(complete))

        self.probe.arm()
        async with timed(self._metrics, "level2_complete"):
            await self._store.update(self._path("level2"), complete)
            await self._store.update(
                self._path("meta"),
                {
                    "currentLevel": 3,
                    "highestUnlockedLevel": 3,
                    "totalScore": self._scores[1] + self._scores[2],
                },
            )

        await self._pause(self._pauses.after_level_ms)

    async def _level3(self) -> None:
        parts = report_parts(self.team_name, self._scores[1] + self._scores[2])
        for i, section in enumerate(REPORT_SECTIONS):
            author = self.player_ids[i % len(self.player_ids)]
            logger.debug("Team %s: %s writes %s", self.team_id, author, section)
            data = {section: parts[section]}
            self._metrics.add_data_transferred(estimate_bytes(data))
            async with timed(self._metrics, "level3_reportSection"):
                await self._store.update(self._path("level3", "report"), data)

        self._scores[3] = self._rng.randint(200, 499)
        complete = {"score": self._scores[3], "completedAt": now_ms()}
        self._metrics.add_data_transferred(estimate_bytes(complete))

        self.probe.arm()
        async with timed(self._metrics, "level3_complete"):
            await self._store.update(self._path("level3"), complete)
            await self._store.update(
                self._path("meta"), {"currentLevel": 3, "totalScore": self.total_score}
            )
            await self._store.update(self._path(), {"badges": BADGES})

    async def _final_read(self) -> None:
        async with timed(self._metrics, "finalRead"):
            snapshot = await self._store.read(self._path())
            if snapshot.exists:
                self._metrics.add_data_transferred(estimate_bytes(snapshot.value))

    def _teardown(self) -> None:
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()
        for _ in range(self._open_connections):
            self._metrics.connection_closed()
        self._open_connections = 0

    @property
    def total_score(self) -> int:
        return sum(self._scores.values())
