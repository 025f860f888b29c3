"""Team workload module."""

from .game_state import CRITERIA_BY_ROLE, FUNCTIONAL_ROLES, create_initial_game_state
from .team import ITeamWorkload, PropagationProbe, TeamWorkload, WorkloadPauses
from .timing import estimate_bytes, now_ms, timed

__all__ = [
    "CRITERIA_BY_ROLE",
    "FUNCTIONAL_ROLES",
    "create_initial_game_state",
    "ITeamWorkload",
    "TeamWorkload",
    "PropagationProbe",
    "WorkloadPauses",
    "estimate_bytes",
    "now_ms",
    "timed",
]
