import pytest
from sqlalchemy import text

from app import create_app
from league.config import Settings


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", log_level="WARNING")


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.config["TESTING"] = True
    yield app
    app.extensions["league_engine"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def engine(app):
    return app.extensions["league_engine"]


@pytest.fixture
def count_rows(engine):
    """Count rows in a table through the app's own pool."""
    def _count(table):
        with engine.connect() as conn:
            return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()
    return _count


@pytest.fixture
def add_team(client):
    def _add(name, **extra):
        response = client.post("/api/teams", json={"teamName": name, **extra})
        assert response.status_code == 201, response.get_json()
        return response.get_json()["teamId"]
    return _add


@pytest.fixture
def add_player(client):
    def _add(name, team_id):
        response = client.post("/api/players", json={"playerName": name, "teamId": team_id})
        assert response.status_code == 201, response.get_json()
        return response.get_json()["playerId"]
    return _add


@pytest.fixture
def league(add_team, add_player):
    """Two teams with two players each."""
    mi = add_team("Mumbai Indians", owner="Reliance", home="Wankhede", logoUrl="https://img/mi.png")
    csk = add_team("Chennai Super Kings", owner="CSK Ltd", home="Chepauk")
    return {
        "mi": mi,
        "csk": csk,
        "rohit": add_player("Rohit Sharma", mi),
        "bumrah": add_player("Jasprit Bumrah", mi),
        "dhoni": add_player("MS Dhoni", csk),
        "jadeja": add_player("Ravindra Jadeja", csk),
    }


@pytest.fixture
def match_payload(league):
    """A valid match: MI 175 from the bat + 5 extras = 180, CSK 110 + 10 = 120."""
    def _payload(**overrides):
        payload = {
            "matchNo": 1,
            "matchDate": "2024-04-01",
            "team1Id": league["mi"],
            "team2Id": league["csk"],
            "team1Score": "180/4",
            "team2Score": "120/7",
            "team1Extras": 5,
            "team2Extras": 10,
            "winnerId": league["mi"],
            "momId": league["rohit"],
            "venue": "Wankhede",
            "playerPerformances": [
                {"playerId": league["rohit"], "runsScored": 100, "ballsFaced": 50,
                 "wicketsTaken": 0, "oversBowled": 0, "runsConceded": 0},
                {"playerId": league["bumrah"], "runsScored": 75, "ballsFaced": 60,
                 "wicketsTaken": 3, "oversBowled": 4, "runsConceded": 20},
                {"playerId": league["dhoni"], "runsScored": 60, "ballsFaced": 40,
                 "wicketsTaken": 0, "oversBowled": 0, "runsConceded": 0},
                {"playerId": league["jadeja"], "runsScored": 50, "ballsFaced": 30,
                 "wicketsTaken": 2, "oversBowled": 3.4, "runsConceded": 33},
            ],
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
def record_quick_match(client, league):
    """Record a match with no performances; the scores are all extras."""
    def _record(match_no, winner="mi", team1=None, team2=None):
        response = client.post("/api/matches", json={
            "matchNo": match_no,
            "team1Id": team1 or league["mi"],
            "team2Id": team2 or league["csk"],
            "team1Score": "12/0",
            "team2Score": "8/1",
            "team1Extras": 12,
            "team2Extras": 8,
            "winnerId": league[winner] if winner else None,
        })
        assert response.status_code == 201, response.get_json()
        return response.get_json()["matchId"]
    return _record
