"""Score strings and the score-breakdown rule.

A recorded match declares each team's total as a score string ("180/4",
"180/4 (20 ov)", "180"). The breakdown rule says that total must equal
the runs scored by that team's players plus the extras conceded to it.
"""

from __future__ import annotations

import re

from .errors import ScoreMismatchError

_SCORE_RE = re.compile(r"\s*(\d+)\s*(?:/\s*(\d+))?\s*(?:\(\s*\d+(?:\.\d)?\s*ov\s*\))?\s*")


def parse_score(score: str) -> tuple[int, int | None]:
    """Parse a score string into ``(runs, wickets)``.

    Wickets is ``None`` when the string has no ``/wickets`` part
    (all-out totals are often written as just the runs).
    """
    if score is None:
        raise ValueError("Score is required.")
    match = _SCORE_RE.fullmatch(str(score))
    if not match:
        raise ValueError(f"Invalid score '{score}'. Expected runs or runs/wickets, e.g. 180/4.")
    runs = int(match.group(1))
    wickets = int(match.group(2)) if match.group(2) is not None else None
    if wickets is not None and wickets > 10:
        raise ValueError(f"Invalid score '{score}': a team cannot lose more than 10 wickets.")
    return runs, wickets


def declared_runs(score: str) -> int:
    return parse_score(score)[0]


def breakdown_total(player_runs: int, extras: int) -> int:
    return (player_runs or 0) + (extras or 0)


def is_breakdown_valid(score: str, player_runs: int, extras: int) -> bool:
    """True when the declared score equals player runs plus extras."""
    return declared_runs(score) == breakdown_total(player_runs, extras)


def check_score_breakdown(team_label: str, score: str, player_runs: int, extras: int) -> None:
    """Raise :class:`ScoreMismatchError` if the breakdown does not add up."""
    if not is_breakdown_valid(score, player_runs, extras):
        raise ScoreMismatchError(team_label, score, breakdown_total(player_runs, extras))
