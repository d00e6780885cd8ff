def test_player_requires_team(client, league, count_rows):
    before = count_rows("player")

    response = client.post("/api/players", json={"playerName": "Virat Kohli"})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Player name and team ID are required."}
    assert count_rows("player") == before


def test_player_requires_name(client, league):
    response = client.post("/api/players", json={"playerName": "", "teamId": league["mi"]})

    assert response.status_code == 400


def test_player_for_unknown_team_is_404(client, count_rows):
    response = client.post("/api/players", json={"playerName": "Virat Kohli", "teamId": 77})

    assert response.status_code == 404
    assert count_rows("player") == 0


def test_player_team_id_must_be_numeric(client):
    response = client.post("/api/players", json={"playerName": "Virat Kohli", "teamId": "abc"})

    assert response.status_code == 400
    assert "teamId" in response.get_json()["error"]


def test_new_player_starts_with_empty_career(client, league):
    response = client.post("/api/players", json={"playerName": "Tilak Varma", "teamId": str(league["mi"])})

    assert response.status_code == 201
    assert response.get_json()["message"] == "Player added successfully!"
    player_id = response.get_json()["playerId"]

    detail = client.get(f"/api/players/{player_id}").get_json()
    assert detail["player"]["pName"] == "Tilak Varma"
    assert detail["player"]["tName"] == "Mumbai Indians"
    assert detail["player"]["matchesPlayed"] == 0
    assert detail["player"]["best"] is None
    assert detail["performances"] == []


def test_players_listed_by_name_with_team(client, league):
    players = client.get("/api/players").get_json()

    assert [p["pName"] for p in players] == [
        "Jasprit Bumrah", "MS Dhoni", "Ravindra Jadeja", "Rohit Sharma",
    ]
    assert players[1]["tName"] == "Chennai Super Kings"
    assert set(players[0]) == {
        "playerId", "pName", "tName", "matchesPlayed", "totalRuns",
        "avgSr", "wickets", "economy", "best",
    }


def test_unknown_player_is_404(client):
    response = client.get("/api/players/12345")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Player not found"}


def test_player_id_beyond_integer_range_is_404(client):
    response = client.get(f"/api/players/{2**70}")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Player not found"}


def test_player_history_names_opponent(client, league, match_payload):
    assert client.post("/api/matches", json=match_payload()).status_code == 201

    detail = client.get(f"/api/players/{league['jadeja']}").get_json()

    assert detail["performances"] == [{
        "matchId": 1,
        "matchNo": 1,
        "matchDate": "2024-04-01",
        "againstTeam": "Mumbai Indians",
        "runsScored": 50,
        "ballsFaced": 30,
        "wicketsTaken": 2,
        "oversBowled": 3.4,
        "runsConceded": 33,
    }]
