"""Storage-to-wire field maps.

Every response shape has an explicit map of storage column -> JSON key.
Columns that are not listed never leave the server.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class FieldMap:
    """Ordered mapping of storage columns to wire keys for one entity."""

    def __init__(self, *fields: tuple[str, str]):
        self.fields = fields

    def dump(self, row: Mapping[str, Any] | None) -> dict | None:
        if row is None:
            return None
        return {key: _jsonable(row.get(column)) for column, key in self.fields}

    def dump_many(self, rows: Iterable[Mapping[str, Any]]) -> list[dict]:
        return [self.dump(row) for row in rows]

    def extend(self, *fields: tuple[str, str]) -> "FieldMap":
        return FieldMap(*self.fields, *fields)


# ───── Teams ─────

TEAM_SUMMARY = FieldMap(
    ("team_id", "teamId"),
    ("t_name", "tName"),
    ("team_logo_url", "teamLogoUrl"),
)

TEAM_DETAIL = TEAM_SUMMARY.extend(
    ("owner", "owner"),
    ("t_home", "tHome"),
)

ROSTER_ENTRY = FieldMap(
    ("player_id", "playerId"),
    ("p_name", "pName"),
)

STANDING = FieldMap(
    ("team_id", "teamId"),
    ("t_name", "tName"),
    ("team_logo_url", "teamLogoUrl"),
    ("matches_played", "matchesPlayed"),
    ("wins", "wins"),
    ("losses", "losses"),
    ("no_results", "noResults"),
    ("points", "points"),
)


# ───── Players ─────

_CAREER = (
    ("matches_played", "matchesPlayed"),
    ("total_runs", "totalRuns"),
    ("avg_sr", "avgSr"),
    ("wickets", "wickets"),
    ("economy", "economy"),
    ("best", "best"),
)

PLAYER_LISTING = FieldMap(
    ("player_id", "playerId"),
    ("p_name", "pName"),
    ("t_name", "tName"),
    *_CAREER,
)

PLAYER_DETAIL = FieldMap(
    ("player_id", "playerId"),
    ("p_name", "pName"),
    ("team_id", "teamId"),
    ("t_name", "tName"),
    ("team_logo_url", "teamLogoUrl"),
    *_CAREER,
)

PERFORMANCE = FieldMap(
    ("match_id", "matchId"),
    ("match_no", "matchNo"),
    ("match_date", "matchDate"),
    ("against_team", "againstTeam"),
    ("runs_scored", "runsScored"),
    ("balls_faced", "ballsFaced"),
    ("wickets_taken", "wicketsTaken"),
    ("overs_bowled", "oversBowled"),
    ("runs_conceded", "runsConceded"),
)

TOP_BATTER = FieldMap(
    ("player_id", "playerId"),
    ("p_name", "pName"),
    ("t_name", "tName"),
    ("matches_played", "matchesPlayed"),
    ("total_runs", "totalRuns"),
    ("avg_sr", "avgSr"),
)

TOP_BOWLER = FieldMap(
    ("player_id", "playerId"),
    ("p_name", "pName"),
    ("t_name", "tName"),
    ("matches_played", "matchesPlayed"),
    ("wickets", "wickets"),
    ("economy", "economy"),
    ("best", "best"),
)


# ───── Matches ─────

MATCH_SUMMARY = FieldMap(
    ("match_id", "matchId"),
    ("match_no", "matchNo"),
    ("match_date", "matchDate"),
    ("team1_name", "team1Name"),
    ("team2_name", "team2Name"),
    ("team1_score", "team1Score"),
    ("team2_score", "team2Score"),
    ("winner_name", "winnerName"),
    ("venue", "venue"),
)

RECENT_MATCH = MATCH_SUMMARY.extend(
    ("team1_logo", "team1Logo"),
    ("team2_logo", "team2Logo"),
    ("mom_name", "momName"),
)

NEXT_MATCH_NUMBER = FieldMap(("next_match_no", "nextMatchNo"))
