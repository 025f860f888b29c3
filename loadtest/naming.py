"""Identifiers for generated data, all under one reserved prefix."""

import re

TEST_PREFIX = "loadtest_"
ROOT_COLLECTION = "games"

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def team_name(team_index: int) -> str:
    return f"{TEST_PREFIX}team_{team_index:03d}"


def team_id(name: str) -> str:
    """Lower-case the name and replace every non-alphanumeric character with '_'."""
    return _NON_ALNUM.sub("_", name.strip().lower())


def player_id(team_index: int, player_index: int) -> str:
    return f"{TEST_PREFIX}player_t{team_index}_p{player_index}"


def team_path(tid: str, *parts: str) -> str:
    return "/".join((ROOT_COLLECTION, tid) + parts)
