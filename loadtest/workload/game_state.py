"""Game records the workload writes, shaped like the live game's data."""

from typing import Any

from .timing import now_ms

FUNCTIONAL_ROLES = ["productDev", "packageDev", "quality", "pim"]

CRITERIA_BY_ROLE = {
    "productDev": ["pd1", "pd2", "pd3", "pd4", "pd5"],
    "packageDev": ["pk1", "pk2", "pk3", "pk4", "pk5"],
    "quality": ["qa1", "qa2", "qa3", "qa4", "qa5"],
    "pim": ["pim1", "pim2", "pim3", "pim4", "pim5"],
}

SAMPLING_STEPS = [
    {"step": "receiving", "tests": ["visual", "weight"], "frequency": "every_batch"},
    {"step": "mixing", "tests": ["temp", "viscosity"], "frequency": "every_15min"},
    {"step": "blending", "tests": ["moisture", "homogeneity"], "frequency": "every_30min"},
    {"step": "gelling", "tests": ["gel", "temp"], "frequency": "continuous"},
    {"step": "cooling", "tests": ["temp", "texture", "moisture"], "frequency": "every_batch"},
    {"step": "portioning", "tests": ["weight"], "frequency": "every_100units"},
    {"step": "packaging", "tests": ["seal", "visual", "dimensions"], "frequency": "every_batch"},
    {"step": "release", "tests": ["micro", "sensory", "visual"], "frequency": "per_batch"},
]

REPORT_SECTIONS = ["summary", "findings", "recommendations"]

BADGES = ["criteria-master", "sampling-specialist", "mission-commander"]


def create_initial_game_state(team_id: str, team_name: str) -> dict[str, Any]:
    """Full record a commander writes when creating a game."""
    return {
        "gameCode": team_id,
        "teamId": team_id,
        "meta": {
            "teamName": team_name,
            "createdAt": now_ms(),
            "currentLevel": 0,
            "highestUnlockedLevel": 1,
            "totalScore": 0,
            "isPaused": False,
            "isLocked": False,
            "gameStarted": False,
        },
        "level1": {
            "roleSelections": {
                role: {"playerSelections": {}, "confirmedSelections": None, "confirmedBy": []}
                for role in FUNCTIONAL_ROLES
            },
            "selectedCriteria": [],
            "score": 0,
            "completedAt": None,
        },
        "level2": {
            "samplingPlan": None,
            "score": 0,
            "completedAt": None,
        },
        "level3": {
            "report": {"summary": "", "findings": "", "recommendations": ""},
            "score": 0,
            "completedAt": None,
        },
        "players": {},
        "badges": [],
    }


def player_record(role: str) -> dict[str, Any]:
    timestamp = now_ms()
    return {
        "role": role,
        "functionalRole": None,
        "joinedAt": timestamp,
        "lastActive": timestamp,
    }


def report_parts(team_name: str, total_score: int) -> dict[str, str]:
    return {
        "summary": (
            f"Team {team_name} completed the Joy Bites scale trial. All critical "
            f"success criteria were met with a total score of {total_score}."
        ),
        "findings": (
            "Key findings: Flavor familiarity scored 4.2/5. Zero particle release in "
            "microgravity simulation. Package opening force at 12N. Line efficiency at 89%."
        ),
        "recommendations": (
            "Recommendations: 1) Proceed to full production run. 2) Monitor gelling "
            "temperature closely. 3) Schedule operator refresher training before next batch."
        ),
    }
