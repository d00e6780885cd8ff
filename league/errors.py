"""Exceptions raised by the league data layer.

Each error carries the HTTP status it is reported with, so the web layer
only has to turn ``message`` into a JSON body.
"""


class LeagueError(Exception):
    """Base class for all league errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LeagueError):
    """Request data is missing or inconsistent."""

    status_code = 400


class NotFoundError(LeagueError):
    status_code = 404


class ConflictError(LeagueError):
    """A unique value (team name, match number) is already taken."""

    status_code = 409


class PersistenceError(LeagueError):
    """A write failed inside the database."""


class ScoreMismatchError(LeagueError):
    """A team's declared score does not reconcile with its breakdown."""

    def __init__(self, team_label: str, declared_score: str, breakdown_total: int):
        super().__init__(
            f"{team_label} score breakdown does not match the total score of {declared_score}."
        )
        self.team_label = team_label
        self.declared_score = declared_score
        self.breakdown_total = breakdown_total
