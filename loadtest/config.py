"""Project-level configuration, path helpers and settings models."""

import os
from pathlib import Path
from typing import Union

from dotenv import load_dotenv
from pydantic import BaseModel, Field

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
LOGS_DIR = PROJECT_ROOT / "logs"
DEFAULT_DB_PATH = DATA_DIR / "loadtest.db"
DEFAULT_LOG_PATH = LOGS_DIR / "loadtest.log"
DEFAULT_ENV_PATH = PROJECT_ROOT / ".env"

# Values shipped in example .env files that mean "not configured".
PLACEHOLDER_VALUES = {"your-api-key-here", "your-database-url-here"}


PathLike = Union[str, Path]


class ConfigError(Exception):
    """Raised when required backend configuration is missing or invalid."""


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve LOADTEST_DB_PATH to an absolute path."""
    if not env_value:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def load_env(env_path: PathLike | None = None) -> None:
    """Load the project .env file without overriding the process environment."""
    load_dotenv(env_path or DEFAULT_ENV_PATH, override=False)


def _env(name: str) -> str | None:
    """Read VITE_-prefixed variable first, then the unprefixed one."""
    for key in (f"VITE_{name}", name):
        value = (os.getenv(key) or "").strip()
        if value:
            return value
    return None


class FirebaseSettings(BaseModel):
    """Connection settings for a Firebase Realtime Database."""

    database_url: str
    api_key: str | None = None
    project_id: str | None = None
    auth_token: str | None = None

    @classmethod
    def from_env(cls) -> "FirebaseSettings":
        """Build settings from the environment; raise ConfigError if unusable."""
        database_url = _env("FIREBASE_DATABASE_URL")
        if not database_url or database_url in PLACEHOLDER_VALUES:
            raise ConfigError(
                "Firebase configuration is missing. Ensure .env has "
                "VITE_FIREBASE_DATABASE_URL (and optionally VITE_FIREBASE_API_KEY)."
            )

        api_key = _env("FIREBASE_API_KEY")
        if api_key in PLACEHOLDER_VALUES:
            raise ConfigError("VITE_FIREBASE_API_KEY still holds a placeholder value.")

        return cls(
            database_url=database_url.rstrip("/"),
            api_key=api_key,
            project_id=_env("FIREBASE_PROJECT_ID"),
            auth_token=_env("FIREBASE_AUTH_TOKEN"),
        )


class RunSettings(BaseModel):
    """Parameters of a single load-test run."""

    teams: int = Field(default=30, ge=1)
    players: int = Field(default=10, ge=1)
    stagger_ms: int = Field(default=200, ge=0)
    seed: int | None = None


class Thresholds(BaseModel):
    """Heuristic limits used by bottleneck detection and recommendations.

    Latencies are milliseconds, the error rate is a percentage.
    """

    slow_p95_critical_ms: float = 1000.0
    slow_p95_warning_ms: float = 500.0
    high_variance_ratio: float = 5.0
    high_variance_min_count: int = 5
    propagation_p95_bottleneck_ms: float = 500.0
    propagation_p95_recommend_ms: float = 300.0
    error_rate_pct: float = 1.0
    peak_connections: int = 100
    data_transferred_bytes: int = 5 * 1024 * 1024
    capacity_teams: int = 30
    capacity_players: int = 10
