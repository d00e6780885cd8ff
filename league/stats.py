"""Batting and bowling figures derived from per-match performances."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional


def overs_to_balls(overs: float) -> int:
    """3.4 overs -> 22 balls (the decimal part counts balls, not tenths)."""
    overs = float(overs or 0)
    full_overs = int(overs)
    part_balls = round((overs - full_overs) * 10)
    return full_overs * 6 + part_balls


def balls_to_overs(balls: int) -> float:
    return float(f"{balls // 6}.{balls % 6}")


def is_valid_overs(overs: float) -> bool:
    overs = float(overs or 0)
    return overs >= 0 and round((overs - int(overs)) * 10) <= 5


def strike_rate(runs: int, balls: int) -> float:
    if not balls:
        return 0.0
    return round((runs / balls) * 100, 2)


def economy(runs_conceded: int, balls_bowled: int) -> float:
    if not balls_bowled:
        return 0.0
    return round(runs_conceded / (balls_bowled / 6), 2)


def best_figures(spells: Iterable[tuple[int, int]]) -> Optional[str]:
    """Best bowling figure as "W/R" from ``(wickets, runs_conceded)`` spells.

    Most wickets wins; fewer runs conceded breaks a tie.
    """
    spells = list(spells)
    if not spells:
        return None
    wickets, runs = max(spells, key=lambda s: (s[0], -s[1]))
    return f"{wickets}/{runs}"


@dataclass
class CareerStats:
    """Cumulative figures stored on the player row."""
    matches_played: int = 0
    total_runs: int = 0
    avg_sr: float = 0.0
    wickets: int = 0
    economy: float = 0.0
    best: Optional[str] = None

    def as_row(self) -> dict:
        return {
            "matches_played": self.matches_played,
            "total_runs": self.total_runs,
            "avg_sr": self.avg_sr,
            "wickets": self.wickets,
            "economy": self.economy,
            "best": self.best,
        }


def career_stats(performances: Iterable[Mapping]) -> CareerStats:
    """Aggregate ``player_match`` rows into career figures."""
    performances = list(performances)
    total_runs = sum(p.get("runs_scored") or 0 for p in performances)
    total_balls = sum(p.get("balls_faced") or 0 for p in performances)
    total_wickets = sum(p.get("wickets_taken") or 0 for p in performances)
    total_conceded = sum(p.get("runs_conceded") or 0 for p in performances)

    # Only spells with at least one ball bowled count as bowling
    spells = [
        (p.get("wickets_taken") or 0, p.get("runs_conceded") or 0)
        for p in performances
        if overs_to_balls(p.get("overs_bowled") or 0) > 0
    ]
    balls_bowled = sum(overs_to_balls(p.get("overs_bowled") or 0) for p in performances)

    return CareerStats(
        matches_played=len(performances),
        total_runs=total_runs,
        avg_sr=strike_rate(total_runs, total_balls),
        wickets=total_wickets,
        economy=economy(total_conceded, balls_bowled),
        best=best_figures(spells),
    )
