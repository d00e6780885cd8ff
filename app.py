"""Cricket League Tracker.

Flask web application exposing the league REST API (teams, players,
matches, leaderboards, points table) and serving the static pages that
render it in the browser.
"""

from pathlib import Path

from flask import Blueprint, Flask, current_app, jsonify, request, send_from_directory
from flask_cors import CORS
from pydantic import ValidationError as PayloadError
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException, NotFound

import database as db
from league import serializers as wire
from league.config import Settings
from league.errors import LeagueError, NotFoundError
from league.logger import get_logger, set_log_level
from league.schemas import SQL_INT_MAX, MatchCreate, PlayerCreate, TeamCreate

logger = get_logger("league.app")

api = Blueprint("api", __name__, url_prefix="/api")
pages = Blueprint("pages", __name__)


def create_app(settings: Settings | None = None, engine=None) -> Flask:
    """Build the application around its own connection pool."""
    settings = settings or Settings()
    set_log_level(settings.log_level)

    app = Flask(__name__, static_folder=None)
    app.config["LEAGUE_SETTINGS"] = settings

    engine = engine or db.create_db_engine(settings)
    db.init_db(engine)
    app.extensions["league_engine"] = engine

    CORS(app, resources={r"/api/*": {"origins": settings.cors_origins}})
    app.register_blueprint(api)
    app.register_blueprint(pages)
    _register_error_handlers(app)

    logger.info("League tracker ready (database: %s, pages: %s)",
                engine.dialect.name, settings.static_dir)
    return app


def _engine():
    return current_app.extensions["league_engine"]


def _settings() -> Settings:
    return current_app.config["LEAGUE_SETTINGS"]


def _payload() -> dict:
    """JSON body, falling back to form fields for plain HTML posts."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    return data if isinstance(data, dict) else {}


def _existing_id(value: int, what: str) -> int:
    """Path IDs beyond the integer column range cannot name a stored row."""
    if value > SQL_INT_MAX:
        raise NotFoundError(f"{what} not found")
    return value


# ───── Read API ─────

@api.route("/next-match-number")
def next_match_number():
    return jsonify(wire.NEXT_MATCH_NUMBER.dump(
        {"next_match_no": db.get_next_match_number(_engine())}
    ))


@api.route("/teams")
def list_teams():
    return jsonify(wire.TEAM_SUMMARY.dump_many(db.get_teams(_engine())))


@api.route("/teams/<int:team_id>")
def team_detail(team_id):
    """Team with its squad and match history."""
    team, players, matches = db.get_team_detail(_engine(), _existing_id(team_id, "Team"))
    if not team:
        raise NotFoundError("Team not found")
    return jsonify({
        "team": wire.TEAM_DETAIL.dump(team),
        "players": wire.ROSTER_ENTRY.dump_many(players),
        "matches": wire.MATCH_SUMMARY.dump_many(matches),
    })


@api.route("/teams/<int:team_id>/players")
def team_players(team_id):
    players = db.get_team_players(_engine(), _existing_id(team_id, "Team"))
    return jsonify(wire.ROSTER_ENTRY.dump_many(players))


@api.route("/players")
def list_players():
    return jsonify(wire.PLAYER_LISTING.dump_many(db.get_players(_engine())))


@api.route("/players/<int:player_id>")
def player_detail(player_id):
    """Player career figures and per-match performances."""
    player, performances = db.get_player_detail(_engine(), _existing_id(player_id, "Player"))
    if not player:
        raise NotFoundError("Player not found")
    return jsonify({
        "player": wire.PLAYER_DETAIL.dump(player),
        "performances": wire.PERFORMANCE.dump_many(performances),
    })


@api.route("/top-batters")
def top_batters():
    rows = db.get_top_batters(_engine(), _settings().leaderboard_limit)
    return jsonify(wire.TOP_BATTER.dump_many(rows))


@api.route("/top-bowlers")
def top_bowlers():
    rows = db.get_top_bowlers(_engine(), _settings().leaderboard_limit)
    return jsonify(wire.TOP_BOWLER.dump_many(rows))


@api.route("/points-table")
def points_table():
    return jsonify(wire.STANDING.dump_many(db.get_points_table(_engine())))


@api.route("/matches/recent")
def recent_matches():
    rows = db.get_recent_matches(_engine(), _settings().recent_matches_limit)
    return jsonify(wire.RECENT_MATCH.dump_many(rows))


# ───── Write API ─────

@api.route("/teams", methods=["POST"])
def add_team():
    payload = TeamCreate.model_validate(_payload())
    team_id = db.create_team(_engine(), payload)
    return jsonify({"message": "Team added successfully!", "teamId": team_id}), 201


@api.route("/players", methods=["POST"])
def add_player():
    payload = PlayerCreate.model_validate(_payload())
    player_id = db.create_player(_engine(), payload)
    return jsonify({"message": "Player added successfully!", "playerId": player_id}), 201


@api.route("/matches", methods=["POST"])
def add_match():
    """Record a completed match with extras and player performances."""
    payload = MatchCreate.model_validate(_payload())
    match_id = db.record_match(
        _engine(), payload, enforce_breakdown=_settings().enforce_score_breakdown
    )
    return jsonify({"message": "Match recorded successfully!", "matchId": match_id}), 201


# ───── Pages ─────

def _page(filename):
    return send_from_directory(_settings().static_dir, filename)


@pages.route("/")
def index():
    return _page("index.html")


@pages.route("/team")
def team_page():
    return _page("team-details.html")


@pages.route("/player")
def player_page():
    return _page("player-details.html")


@pages.route("/<path:path>")
def static_page(path):
    """Serve assets as-is; extensionless paths resolve to ``<path>.html``."""
    if path.startswith("api/"):
        raise NotFound()
    if path.endswith("/"):
        return _page("index.html")
    if Path(path).suffix:
        return _page(path)
    return _page(f"{path}.html")


# ───── Errors ─────

def _describe(exc: PayloadError) -> str:
    """First validation problem as a sentence for the error toast."""
    error = exc.errors()[0]
    cause = error.get("ctx", {}).get("error")
    if error["type"] == "value_error" and cause is not None:
        return str(cause)
    field = ".".join(str(part) for part in error["loc"])
    return f"{field}: {error['msg']}" if field else error["msg"]


def _register_error_handlers(app: Flask):
    @app.errorhandler(LeagueError)
    def league_error(exc):
        return jsonify({"error": exc.message}), exc.status_code

    @app.errorhandler(PayloadError)
    def payload_error(exc):
        return jsonify({"error": _describe(exc)}), 400

    @app.errorhandler(SQLAlchemyError)
    def database_error(exc):
        logger.exception("Database error on %s %s", request.method, request.path)
        return jsonify({"error": "Database error."}), 500

    @app.errorhandler(HTTPException)
    def http_error(exc):
        if request.path.startswith("/api/"):
            return jsonify({"error": exc.description}), exc.code
        return exc


def main():
    settings = Settings()
    app = create_app(settings)
    try:
        app.run(host=settings.host, port=settings.port, debug=settings.debug)
    finally:
        app.extensions["league_engine"].dispose()


if __name__ == "__main__":
    main()
