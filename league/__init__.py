"""Cricket league domain: settings, scoring rules, statistics and wire formats."""

from .config import Settings
from .errors import (
    ConflictError,
    LeagueError,
    NotFoundError,
    PersistenceError,
    ScoreMismatchError,
    ValidationError,
)
from .scoring import check_score_breakdown, parse_score
from .stats import career_stats

__all__ = [
    "Settings",
    "LeagueError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "PersistenceError",
    "ScoreMismatchError",
    "check_score_breakdown",
    "parse_score",
    "career_stats",
]
