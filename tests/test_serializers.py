from datetime import date
from decimal import Decimal

from league import serializers as wire


def test_field_map_renames_and_hides_unlisted_columns():
    row = {"team_id": 1, "t_name": "Mumbai Indians", "team_logo_url": None, "owner": "Reliance"}

    assert wire.TEAM_SUMMARY.dump(row) == {
        "teamId": 1,
        "tName": "Mumbai Indians",
        "teamLogoUrl": None,
    }


def test_extended_map_keeps_base_fields():
    row = {"team_id": 1, "t_name": "MI", "team_logo_url": "x", "owner": "Reliance", "t_home": "Wankhede"}

    assert wire.TEAM_DETAIL.dump(row)["tHome"] == "Wankhede"
    assert wire.TEAM_DETAIL.dump(row)["teamId"] == 1


def test_values_are_made_json_safe():
    row = {"match_id": 3, "match_no": 7, "match_date": date(2024, 4, 1), "team1_name": "MI"}

    dumped = wire.MATCH_SUMMARY.dump(row)

    assert dumped["matchDate"] == "2024-04-01"
    assert dumped["winnerName"] is None
    assert wire.TOP_BATTER.dump({"avg_sr": Decimal("133.33")})["avgSr"] == 133.33


def test_dump_none_and_many():
    assert wire.ROSTER_ENTRY.dump(None) is None
    assert wire.ROSTER_ENTRY.dump_many([{"player_id": 1, "p_name": "A"}]) == [{"playerId": 1, "pName": "A"}]
