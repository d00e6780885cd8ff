import pytest

from league.errors import ScoreMismatchError
from league.scoring import (
    breakdown_total,
    check_score_breakdown,
    declared_runs,
    is_breakdown_valid,
    parse_score,
)


@pytest.mark.parametrize("score, expected", [
    ("180/4", (180, 4)),
    ("180", (180, None)),
    (" 95 / 10 ", (95, 10)),
    ("201/3 (20 ov)", (201, 3)),
    ("154 (19.4 ov)", (154, None)),
])
def test_parse_score(score, expected):
    assert parse_score(score) == expected


@pytest.mark.parametrize("score", [
    "", "abc", "/4", "180/11", "180abc", "0 runs lol", "12/4x", "0abc/xyz",
])
def test_parse_score_rejects_garbage(score):
    with pytest.raises(ValueError):
        parse_score(score)


def test_declared_runs_ignores_wickets():
    assert declared_runs("180/4") == 180


def test_breakdown_total_treats_missing_as_zero():
    assert breakdown_total(None, 5) == 5
    assert breakdown_total(175, None) == 175


def test_breakdown_valid_when_runs_plus_extras_match():
    assert is_breakdown_valid("180/4", 175, 5)
    assert not is_breakdown_valid("180/4", 175, 0)


def test_check_score_breakdown_names_team_and_total():
    with pytest.raises(ScoreMismatchError) as exc_info:
        check_score_breakdown("Team 1", "180/4", 175, 0)

    err = exc_info.value
    assert err.message == "Team 1 score breakdown does not match the total score of 180/4."
    assert err.breakdown_total == 175
    assert err.status_code == 500


def test_check_score_breakdown_passes_silently():
    check_score_breakdown("Team 2", "120/7", 110, 10)
