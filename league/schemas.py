"""Pydantic schemas for request payloads.

Payloads arrive with camelCase keys straight from the browser forms, where
an untouched input is sent as an empty string. Empty strings are treated as
absent values.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .scoring import parse_score
from .stats import balls_to_overs, is_valid_overs, overs_to_balls

# Largest value an INTEGER column holds on every supported engine
SQL_INT_MAX = 2**31 - 1


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Payload(BaseModel):
    """Base schema: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_strings(cls, data):
        if isinstance(data, dict):
            return {key: _blank_to_none(value) for key, value in data.items()}
        return data


class TeamCreate(Payload):
    """Schema for creating a new team."""

    team_name: Optional[str] = Field(None, max_length=100)
    owner: Optional[str] = Field(None, max_length=100)
    home: Optional[str] = Field(None, max_length=100)
    logo_url: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def _require_name(self):
        if not self.team_name:
            raise ValueError("Team name is required.")
        return self


class PlayerCreate(Payload):
    """Schema for creating a new player."""

    player_name: Optional[str] = Field(None, max_length=100)
    team_id: Optional[int] = Field(None, le=SQL_INT_MAX)

    @model_validator(mode="after")
    def _require_name_and_team(self):
        if not self.player_name or not self.team_id:
            raise ValueError("Player name and team ID are required.")
        return self


class PerformanceEntry(Payload):
    """One player's batting and bowling figures in a match."""

    player_id: int = Field(le=SQL_INT_MAX)
    runs_scored: int = Field(0, ge=0, le=SQL_INT_MAX)
    balls_faced: int = Field(0, ge=0, le=SQL_INT_MAX)
    wickets_taken: int = Field(0, ge=0, le=10)
    overs_bowled: float = Field(0.0, ge=0, le=SQL_INT_MAX)
    runs_conceded: int = Field(0, ge=0, le=SQL_INT_MAX)

    @field_validator("runs_scored", "balls_faced", "wickets_taken", "overs_bowled", "runs_conceded", mode="before")
    @classmethod
    def _default_zero(cls, value):
        return 0 if value is None else value

    @field_validator("overs_bowled")
    @classmethod
    def _check_overs(cls, value: float) -> float:
        if not is_valid_overs(value):
            raise ValueError(f"Invalid overs {value}: the ball count after the point must be 0-5.")
        return balls_to_overs(overs_to_balls(value))


class MatchCreate(Payload):
    """Schema for recording a completed match with its performances."""

    match_no: Optional[int] = Field(None, le=SQL_INT_MAX)
    match_date: Optional[date] = None
    team1_id: Optional[int] = Field(None, le=SQL_INT_MAX)
    team2_id: Optional[int] = Field(None, le=SQL_INT_MAX)
    team1_score: Optional[str] = Field(None, max_length=30)
    team2_score: Optional[str] = Field(None, max_length=30)
    team1_extras: int = Field(0, ge=0, le=SQL_INT_MAX)
    team2_extras: int = Field(0, ge=0, le=SQL_INT_MAX)
    winner_id: Optional[int] = Field(None, le=SQL_INT_MAX)
    mom_id: Optional[int] = Field(None, le=SQL_INT_MAX)
    venue: Optional[str] = Field(None, max_length=200)
    player_performances: List[PerformanceEntry] = Field(default_factory=list)

    @field_validator("team1_extras", "team2_extras", mode="before")
    @classmethod
    def _extras_default(cls, value):
        return 0 if value is None else value

    @field_validator("player_performances", mode="before")
    @classmethod
    def _performances_default(cls, value):
        return [] if value is None else value

    @field_validator("team1_score", "team2_score")
    @classmethod
    def _check_score(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            parse_score(value)
        return value

    @model_validator(mode="after")
    def _check_match(self):
        if not self.match_no or not self.team1_id or not self.team2_id:
            raise ValueError("Match number and team IDs are required.")
        if self.match_no < 1:
            raise ValueError("Match number must be a positive integer.")
        if self.team1_id == self.team2_id:
            raise ValueError("A team cannot play against itself.")
        if self.team1_score is None or self.team2_score is None:
            raise ValueError("Both team scores are required.")
        if self.winner_id is not None and self.winner_id not in (self.team1_id, self.team2_id):
            raise ValueError("Winner must be one of the two competing teams.")
        player_ids = [p.player_id for p in self.player_performances]
        if len(player_ids) != len(set(player_ids)):
            raise ValueError("Each player can only have one performance per match.")
        return self

    def team_entries(self):
        """``(label, team_id, score, extras)`` for both sides."""
        return [
            ("Team 1", self.team1_id, self.team1_score, self.team1_extras),
            ("Team 2", self.team2_id, self.team2_score, self.team2_extras),
        ]
