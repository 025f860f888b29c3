"""Per-team and per-run results."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TeamOutcome:
    """Terminal state of one team simulation."""

    team_index: int
    team_id: str
    success: bool
    error: Exception | None = None

    @classmethod
    def succeeded(cls, team_index: int, team_id: str) -> "TeamOutcome":
        return cls(team_index=team_index, team_id=team_id, success=True)

    @classmethod
    def failed(cls, team_index: int, team_id: str, error: Exception) -> "TeamOutcome":
        return cls(team_index=team_index, team_id=team_id, success=False, error=error)

    @property
    def error_message(self) -> str | None:
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__


@dataclass
class RunResult:
    """Everything the orchestrator knows once every team has settled."""

    teams: int
    players: int
    duration_ms: float
    outcomes: list[TeamOutcome] = field(default_factory=list)

    @property
    def completed(self) -> list[str]:
        """Team ids that finished every phase."""
        return [o.team_id for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[TeamOutcome]:
        return [o for o in self.outcomes if not o.success]
