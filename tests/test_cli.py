"""Tests for the command-line entry point."""

import asyncio
import json

import pytest

from loadtest import cli
from loadtest.app import Application
from loadtest.store import SqliteStore


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    """Keep the CLI away from the project .env file and global logging."""
    monkeypatch.setattr(cli, "load_env", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    for name in ("VITE_FIREBASE_DATABASE_URL", "FIREBASE_DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """File database for the local backend."""
    path = tmp_path / "run.db"
    monkeypatch.setenv("LOADTEST_DB_PATH", str(path))
    return path


async def read_games(path):
    st = SqliteStore(path)
    await st.init()
    games = (await st.read("games")).value
    await st.close()
    return games


class TestArguments:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test default flag values."""
        args = cli.build_parser().parse_args([])

        assert (args.teams, args.players, args.stagger) == (30, 10, 200)
        assert not args.cleanup_only
        assert not args.no_cleanup
        assert args.backend == "firebase"

    def test_equals_syntax(self):
        """Test --flag=value forms."""
        args = cli.build_parser().parse_args(["--teams=3", "--players=4", "--stagger=500"])
        assert (args.teams, args.players, args.stagger) == (3, 4, 500)

    def test_help_exits_zero(self, capsys):
        """Test that -h prints usage and exits successfully."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-h"])

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "--cleanup-only" in out
        assert "--no-cleanup" in out

    def test_invalid_team_count(self):
        """Test that zero teams is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--teams=0"])
        assert exc_info.value.code == 2

    def test_cleanup_flags_exclusive(self):
        """Test that --cleanup-only and --no-cleanup cannot be combined."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--cleanup-only", "--no-cleanup"])
        assert exc_info.value.code == 2


class TestMain:
    """Tests for complete CLI runs."""

    def test_missing_config_exits_one(self):
        """Test that the firebase backend without a URL exits with 1."""
        assert cli.main(["--teams=1", "--players=1"]) == 1

    def test_local_run_with_cleanup(self, db_path, tmp_path, capsys):
        """Test a small run that prints the report and removes its data."""
        json_path = tmp_path / "report.json"

        code = cli.main(
            [
                "--backend=local",
                "--teams=2",
                "--players=2",
                "--stagger=0",
                "--seed=7",
                f"--report-json={json_path}",
            ]
        )

        assert code == 0
        out = capsys.readouterr().out
        assert "FIREBASE LOAD TEST REPORT" in out
        assert "createGame" in out
        assert "END OF REPORT" in out

        payload = json.loads(json_path.read_text(encoding="utf-8"))
        assert sorted(payload["configuration"]["completedTeams"]) == [
            "loadtest_team_000",
            "loadtest_team_001",
        ]
        assert payload["report"]["connections"]["peak"] >= 2

    async def test_no_cleanup_then_cleanup_only(self, db_path):
        """Test that kept data is removed by a later --cleanup-only run."""
        code = await asyncio.to_thread(
            cli.main, ["--backend=local", "--teams=2", "--players=1", "--stagger=0", "--no-cleanup"]
        )
        assert code == 0
        kept = await read_games(db_path)
        assert sorted(kept) == ["loadtest_team_000", "loadtest_team_001"]

        code = await asyncio.to_thread(cli.main, ["--backend=local", "--cleanup-only"])
        assert code == 0
        assert await read_games(db_path) is None

    def test_fatal_error_exits_one(self, db_path, monkeypatch):
        """Test that an unexpected exception maps to exit code 1."""

        async def explode(self, settings):
            raise RuntimeError("store unreachable")

        monkeypatch.setattr(Application, "run_load_test", explode)

        assert cli.main(["--backend=local", "--teams=1", "--players=1"]) == 1
