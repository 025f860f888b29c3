"""Command-line entry point of the load-test harness."""

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

from .app import Application
from .config import ConfigError, RunSettings, load_env
from .logging_config import get_logger, setup_logging
from .report import render_failures, render_report, report_json

logger = get_logger(__name__)

EXAMPLES = """\
examples:
  loadtest                                   30 teams, 10 players
  loadtest --teams=3 --players=3             small test
  loadtest --teams=5 --players=5 --stagger=500
  loadtest --cleanup-only                    only remove leftover test data
  loadtest --no-cleanup                      keep test data after the run
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loadtest",
        description="Firebase load test for Mission North Star: simulates "
        "concurrent teams playing the game and reports store performance.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--teams", type=int, default=30, metavar="N",
                        help="number of teams to simulate (default: 30)")
    parser.add_argument("--players", type=int, default=10, metavar="N",
                        help="number of players per team (default: 10)")
    parser.add_argument("--stagger", type=int, default=200, metavar="MS",
                        help="milliseconds between team starts (default: 200)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--cleanup-only", action="store_true",
                      help="only remove leftover test data, do not run the test")
    mode.add_argument("--no-cleanup", action="store_true",
                      help="skip cleanup after the test finishes")
    parser.add_argument("--backend", choices=("firebase", "local"), default="firebase",
                        help="firebase (default) or a local SQLite-backed store")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for the workload's random values")
    parser.add_argument("--report-json", metavar="PATH", default=None,
                        help="also write the report as JSON to PATH")
    parser.add_argument("--log-level", default=None,
                        help="log level (default: LOG_LEVEL env var or INFO)")
    parser.add_argument("--log-file", default=None, help=argparse.SUPPRESS)
    return parser


async def _run(args: argparse.Namespace, settings: RunSettings) -> int:
    app = Application(backend=args.backend)
    await app.start()
    try:
        logger.info("Firebase Load Test - Mission North Star (%s backend)", args.backend)

        if args.cleanup_only:
            await app.cleanup()
            return 0

        result = await app.run_load_test(settings)

        failures = render_failures(result.outcomes)
        if failures:
            print(failures)

        report, analysis = app.build_report(settings.teams, settings.players)
        print(render_report(report, analysis, result))

        if args.report_json:
            Path(args.report_json).write_text(
                report_json(report, analysis, result), encoding="utf-8"
            )
            logger.info("JSON report written to %s", args.report_json)

        if args.no_cleanup:
            logger.info(
                "Skipping cleanup (--no-cleanup specified). "
                "Run with --cleanup-only to remove test data later."
            )
        else:
            await app.cleanup()
        return 0
    finally:
        await app.stop()


def main(argv: list[str] | None = None) -> int:
    """Run the CLI; return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = RunSettings(
            teams=args.teams,
            players=args.players,
            stagger_ms=args.stagger,
            seed=args.seed,
        )
    except ValidationError as e:
        parser.error(str(e))

    load_env()
    setup_logging(args.log_level, args.log_file)

    try:
        return asyncio.run(_run(args, settings))
    except ConfigError as e:
        logger.error("ERROR: %s", e)
        return 1
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
