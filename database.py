"""Relational store for the league: schema, views, connection pool and queries.

The same tables and SQL run on PostgreSQL, MySQL and SQLite. Reads go
through the shared pool one connection per call; recording a match holds a
single connection for the whole transaction.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    create_engine,
    event,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from league.errors import (
    ConflictError,
    LeagueError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from league.logger import get_logger
from league.scoring import check_score_breakdown
from league.stats import career_stats

logger = get_logger("league.database")

metadata = MetaData()


# ───── Schema ─────

team = Table(
    "team", metadata,
    Column("team_id", Integer, primary_key=True, autoincrement=True),
    Column("t_name", String(100), nullable=False, unique=True),
    Column("owner", String(100)),
    Column("t_home", String(100)),
    Column("team_logo_url", String(500)),
)

player = Table(
    "player", metadata,
    Column("player_id", Integer, primary_key=True, autoincrement=True),
    Column("p_name", String(100), nullable=False),
    Column("team_id", Integer, ForeignKey("team.team_id"), nullable=False, index=True),
    # Career figures, recomputed whenever the player appears in a recorded match
    Column("matches_played", Integer, nullable=False, default=0),
    Column("total_runs", Integer, nullable=False, default=0),
    Column("avg_sr", Float(53), nullable=False, default=0.0),
    Column("wickets", Integer, nullable=False, default=0),
    Column("economy", Float(53), nullable=False, default=0.0),
    Column("best", String(10)),
)

matches = Table(
    "matches", metadata,
    Column("match_id", Integer, primary_key=True, autoincrement=True),
    Column("match_no", Integer, nullable=False, unique=True),
    Column("match_date", Date),
    Column("team1_id", Integer, ForeignKey("team.team_id"), nullable=False),
    Column("team2_id", Integer, ForeignKey("team.team_id"), nullable=False),
    Column("team1_score", String(30)),
    Column("team2_score", String(30)),
    Column("winner_id", Integer, ForeignKey("team.team_id")),
    Column("man_of_the_match_id", Integer, ForeignKey("player.player_id")),
    Column("venue", String(200)),
    CheckConstraint("team1_id <> team2_id", name="ck_matches_distinct_teams"),
)

extras = Table(
    "extras", metadata,
    Column("extras_id", Integer, primary_key=True, autoincrement=True),
    Column("match_id", Integer, ForeignKey("matches.match_id"), nullable=False),
    Column("team_id", Integer, ForeignKey("team.team_id"), nullable=False),
    Column("runs", Integer, nullable=False, default=0),
    UniqueConstraint("match_id", "team_id", name="uq_extras_match_team"),
)

player_match = Table(
    "player_match", metadata,
    Column("player_match_id", Integer, primary_key=True, autoincrement=True),
    Column("match_id", Integer, ForeignKey("matches.match_id"), nullable=False, index=True),
    Column("player_id", Integer, ForeignKey("player.player_id"), nullable=False, index=True),
    Column("runs_scored", Integer, nullable=False, default=0),
    Column("balls_faced", Integer, nullable=False, default=0),
    Column("wickets_taken", Integer, nullable=False, default=0),
    Column("overs_bowled", Float(53), nullable=False, default=0.0),
    Column("runs_conceded", Integer, nullable=False, default=0),
    UniqueConstraint("match_id", "player_id", name="uq_player_match"),
)

VIEWS = {
    "top_batters": """
        SELECT p.player_id, p.p_name, p.team_id, t.t_name,
               p.matches_played, p.total_runs, p.avg_sr
        FROM player p
        LEFT JOIN team t ON p.team_id = t.team_id
        WHERE p.total_runs > 0
    """,
    "top_bowlers": """
        SELECT p.player_id, p.p_name, p.team_id, t.t_name,
               p.matches_played, p.wickets, p.economy, p.best
        FROM player p
        LEFT JOIN team t ON p.team_id = t.team_id
        WHERE p.wickets > 0
    """,
    # 2 points for a win, 1 for a match recorded without a winner
    "team_standings": """
        SELECT t.team_id, t.t_name, t.team_logo_url,
               COUNT(m.match_id) AS matches_played,
               SUM(CASE WHEN m.winner_id = t.team_id THEN 1 ELSE 0 END) AS wins,
               SUM(CASE WHEN m.winner_id IS NOT NULL AND m.winner_id <> t.team_id
                        THEN 1 ELSE 0 END) AS losses,
               SUM(CASE WHEN m.match_id IS NOT NULL AND m.winner_id IS NULL
                        THEN 1 ELSE 0 END) AS no_results,
               2 * SUM(CASE WHEN m.winner_id = t.team_id THEN 1 ELSE 0 END)
                 + SUM(CASE WHEN m.match_id IS NOT NULL AND m.winner_id IS NULL
                            THEN 1 ELSE 0 END) AS points
        FROM team t
        LEFT JOIN matches m ON m.team1_id = t.team_id OR m.team2_id = t.team_id
        GROUP BY t.team_id, t.t_name, t.team_logo_url
    """,
}


# ───── Engine ─────

def _enable_sqlite_foreign_keys(dbapi_conn, _record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def create_db_engine(settings) -> Engine:
    """Build the connection pool described by ``settings``."""
    url = settings.sqlalchemy_url
    options = {"echo": settings.database.echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            options["poolclass"] = StaticPool
    else:
        options["pool_size"] = settings.database.pool_size
        options["pool_recycle"] = settings.database.pool_recycle

    engine = create_engine(url, **options)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_db(engine: Engine):
    """Create tables and views if they don't exist."""
    metadata.create_all(engine)
    with engine.begin() as conn:
        for name, body in VIEWS.items():
            if conn.dialect.name == "sqlite":
                conn.execute(text(f"CREATE VIEW IF NOT EXISTS {name} AS {body}"))
            else:
                conn.execute(text(f"CREATE OR REPLACE VIEW {name} AS {body}"))
    logger.info("Schema ready on %s (%d tables, %d views)",
                engine.dialect.name, len(metadata.tables), len(VIEWS))


def _rows(conn, sql: str, **params) -> list[dict]:
    return [dict(r) for r in conn.execute(text(sql), params).mappings()]


def _row(conn, sql: str, **params):
    row = conn.execute(text(sql), params).mappings().first()
    return dict(row) if row else None


# ───── Teams ─────

def get_teams(engine: Engine):
    """Return every team, ordered by name."""
    with engine.connect() as conn:
        return _rows(conn, "SELECT team_id, t_name, team_logo_url FROM team ORDER BY t_name")


def get_team_players(engine: Engine, team_id: int):
    with engine.connect() as conn:
        return _rows(conn, """
            SELECT player_id, p_name FROM player
            WHERE team_id = :team_id
            ORDER BY p_name, player_id
        """, team_id=team_id)


def get_team_detail(engine: Engine, team_id: int):
    """Return ``(team, players, matches)``; team is None if unknown."""
    with engine.connect() as conn:
        row = _row(conn, "SELECT * FROM team WHERE team_id = :team_id", team_id=team_id)
        if not row:
            return None, [], []
        players = _rows(conn, """
            SELECT player_id, p_name FROM player
            WHERE team_id = :team_id
            ORDER BY p_name, player_id
        """, team_id=team_id)
        history = _rows(conn, """
            SELECT m.match_id, m.match_no, m.match_date, m.venue,
                   t1.t_name AS team1_name, t2.t_name AS team2_name,
                   m.team1_score, m.team2_score, w.t_name AS winner_name
            FROM matches m
            JOIN team t1 ON m.team1_id = t1.team_id
            JOIN team t2 ON m.team2_id = t2.team_id
            LEFT JOIN team w ON m.winner_id = w.team_id
            WHERE m.team1_id = :team_id OR m.team2_id = :team_id
            ORDER BY m.match_no DESC
        """, team_id=team_id)
    return row, players, history


def _team_name_taken(conn, name: str) -> bool:
    return conn.execute(select(team.c.team_id).where(team.c.t_name == name)).first() is not None


def _team_exists(name: str) -> ConflictError:
    return ConflictError(f"Team '{name}' already exists.")


def create_team(engine: Engine, payload) -> int:
    """Insert a team. Returns team_id."""
    try:
        with engine.begin() as conn:
            if _team_name_taken(conn, payload.team_name):
                raise _team_exists(payload.team_name)
            team_id = conn.execute(team.insert().values(
                t_name=payload.team_name,
                owner=payload.owner,
                t_home=payload.home,
                team_logo_url=payload.logo_url,
            )).inserted_primary_key[0]
    except IntegrityError as exc:
        # A concurrent request took the name between the check and the insert
        logger.warning("Team '%s' lost an insert race: %s", payload.team_name, exc)
        raise _team_exists(payload.team_name) from exc
    except SQLAlchemyError as exc:
        logger.error("Failed to add team '%s': %s", payload.team_name, exc)
        raise PersistenceError("Failed to add team.") from exc
    logger.info("Added team %s (%s)", team_id, payload.team_name)
    return team_id


# ───── Players ─────

def get_players(engine: Engine):
    """Return all players with their team name and career figures."""
    with engine.connect() as conn:
        return _rows(conn, """
            SELECT p.player_id, p.p_name, t.t_name, p.matches_played, p.wickets,
                   p.economy, p.best, p.total_runs, p.avg_sr
            FROM player p
            LEFT JOIN team t ON p.team_id = t.team_id
            ORDER BY p.p_name, p.player_id
        """)


def get_player_detail(engine: Engine, player_id: int):
    """Return ``(player, performances)``; player is None if unknown."""
    with engine.connect() as conn:
        row = _row(conn, """
            SELECT p.*, t.t_name, t.team_logo_url
            FROM player p
            JOIN team t ON p.team_id = t.team_id
            WHERE p.player_id = :player_id
        """, player_id=player_id)
        if not row:
            return None, []
        performances = _rows(conn, """
            SELECT pm.*, m.match_no, m.match_date, opp.t_name AS against_team
            FROM player_match pm
            JOIN matches m ON pm.match_id = m.match_id
            JOIN player p ON pm.player_id = p.player_id
            JOIN team opp ON opp.team_id = CASE WHEN m.team1_id = p.team_id
                                                THEN m.team2_id ELSE m.team1_id END
            WHERE pm.player_id = :player_id
            ORDER BY m.match_no DESC
        """, player_id=player_id)
    return row, performances


def create_player(engine: Engine, payload) -> int:
    """Insert a player into an existing team. Returns player_id."""
    try:
        with engine.begin() as conn:
            owner = conn.execute(
                select(team.c.team_id).where(team.c.team_id == payload.team_id)
            ).first()
            if not owner:
                raise NotFoundError("Team not found")
            player_id = conn.execute(player.insert().values(
                p_name=payload.player_name,
                team_id=payload.team_id,
            )).inserted_primary_key[0]
    except SQLAlchemyError as exc:
        logger.error("Failed to add player '%s': %s", payload.player_name, exc)
        raise PersistenceError("Failed to add player.") from exc
    logger.info("Added player %s (%s) to team %s", player_id, payload.player_name, payload.team_id)
    return player_id


def refresh_player_stats(conn, player_ids):
    """Recompute career figures for ``player_ids`` from their performances."""
    for player_id in set(player_ids):
        history = _rows(conn, """
            SELECT runs_scored, balls_faced, wickets_taken, overs_bowled, runs_conceded
            FROM player_match WHERE player_id = :player_id
        """, player_id=player_id)
        conn.execute(
            player.update()
            .where(player.c.player_id == player_id)
            .values(**career_stats(history).as_row())
        )


# ───── Leaderboards ─────

def get_top_batters(engine: Engine, limit=10):
    with engine.connect() as conn:
        return _rows(conn, """
            SELECT * FROM top_batters
            ORDER BY total_runs DESC, avg_sr DESC, p_name
            LIMIT :limit
        """, limit=limit)


def get_top_bowlers(engine: Engine, limit=10):
    with engine.connect() as conn:
        return _rows(conn, """
            SELECT * FROM top_bowlers
            ORDER BY wickets DESC, economy ASC, p_name
            LIMIT :limit
        """, limit=limit)


def get_points_table(engine: Engine):
    with engine.connect() as conn:
        return _rows(conn, """
            SELECT * FROM team_standings
            ORDER BY points DESC, wins DESC, t_name
        """)


# ───── Matches ─────

def get_recent_matches(engine: Engine, limit=5):
    """Return the latest matches, highest match number first."""
    with engine.connect() as conn:
        return _rows(conn, """
            SELECT m.match_id, m.match_no, m.match_date, m.venue,
                   t1.t_name AS team1_name, t2.t_name AS team2_name,
                   t1.team_logo_url AS team1_logo, t2.team_logo_url AS team2_logo,
                   m.team1_score, m.team2_score, w.t_name AS winner_name,
                   mom.p_name AS mom_name
            FROM matches m
            JOIN team t1 ON m.team1_id = t1.team_id
            JOIN team t2 ON m.team2_id = t2.team_id
            LEFT JOIN team w ON m.winner_id = w.team_id
            LEFT JOIN player mom ON m.man_of_the_match_id = mom.player_id
            ORDER BY m.match_no DESC
            LIMIT :limit
        """, limit=limit)


def get_next_match_number(engine: Engine) -> int:
    """Advisory only: the unique constraint on match_no is the real guard."""
    with engine.connect() as conn:
        return conn.execute(text("SELECT COALESCE(MAX(match_no), 0) + 1 FROM matches")).scalar_one()


def _match_number_taken(conn, match_no: int) -> bool:
    return conn.execute(
        select(matches.c.match_id).where(matches.c.match_no == match_no)
    ).first() is not None


def _match_exists(match_no: int) -> ConflictError:
    return ConflictError(f"Match number {match_no} has already been recorded.")


def _check_match_references(conn, payload):
    team_ids = (payload.team1_id, payload.team2_id)
    known_teams = set(conn.execute(
        select(team.c.team_id).where(team.c.team_id.in_(team_ids))
    ).scalars())
    for team_id in team_ids:
        if team_id not in known_teams:
            raise ValidationError(f"Unknown team ID {team_id}.")

    if _match_number_taken(conn, payload.match_no):
        raise _match_exists(payload.match_no)

    player_ids = [p.player_id for p in payload.player_performances]
    if payload.mom_id:
        player_ids.append(payload.mom_id)
    if not player_ids:
        return
    team_of = dict(conn.execute(
        select(player.c.player_id, player.c.team_id).where(player.c.player_id.in_(player_ids))
    ).all())
    for player_id in player_ids:
        if player_id not in team_of:
            raise ValidationError(f"Unknown player ID {player_id}.")
        if team_of[player_id] not in team_ids:
            raise ValidationError(f"Player {player_id} does not play for either team in this match.")


def _score_breakdown(conn, match_id: int, team_id: int):
    """Return ``(player_runs, extras)`` recorded for one side of a match."""
    player_runs = conn.execute(text("""
        SELECT COALESCE(SUM(pm.runs_scored), 0)
        FROM player_match pm
        JOIN player p ON pm.player_id = p.player_id
        WHERE pm.match_id = :match_id AND p.team_id = :team_id
    """), {"match_id": match_id, "team_id": team_id}).scalar_one()
    extras_runs = conn.execute(text("""
        SELECT COALESCE(SUM(runs), 0) FROM extras
        WHERE match_id = :match_id AND team_id = :team_id
    """), {"match_id": match_id, "team_id": team_id}).scalar_one()
    return int(player_runs), int(extras_runs)


def record_match(engine: Engine, payload, enforce_breakdown=True) -> int:
    """Save a match, both extras rows and every performance atomically. Returns match_id.

    The score-breakdown rule is checked inside the transaction, after the
    rows are written and before commit; any failure rolls everything back.
    """
    try:
        with engine.begin() as conn:
            _check_match_references(conn, payload)

            match_id = conn.execute(matches.insert().values(
                match_no=payload.match_no,
                match_date=payload.match_date,
                team1_id=payload.team1_id,
                team2_id=payload.team2_id,
                team1_score=payload.team1_score,
                team2_score=payload.team2_score,
                winner_id=payload.winner_id,
                man_of_the_match_id=payload.mom_id,
                venue=payload.venue,
            )).inserted_primary_key[0]

            for _label, team_id, _score, extras_runs in payload.team_entries():
                conn.execute(extras.insert().values(
                    match_id=match_id, team_id=team_id, runs=extras_runs,
                ))

            if payload.player_performances:
                conn.execute(player_match.insert(), [
                    {
                        "match_id": match_id,
                        "player_id": p.player_id,
                        "runs_scored": p.runs_scored,
                        "balls_faced": p.balls_faced,
                        "wickets_taken": p.wickets_taken,
                        "overs_bowled": p.overs_bowled,
                        "runs_conceded": p.runs_conceded,
                    }
                    for p in payload.player_performances
                ])

            if enforce_breakdown:
                for label, team_id, score, _extras in payload.team_entries():
                    player_runs, extras_runs = _score_breakdown(conn, match_id, team_id)
                    check_score_breakdown(label, score, player_runs, extras_runs)

            refresh_player_stats(conn, [p.player_id for p in payload.player_performances])
    except LeagueError as exc:
        logger.warning("Match #%s rolled back: %s", payload.match_no, exc.message)
        raise
    except IntegrityError as exc:
        # References were checked above, so this is match_no taken by a concurrent request
        logger.warning("Match #%s lost an insert race: %s", payload.match_no, exc)
        raise _match_exists(payload.match_no) from exc
    except SQLAlchemyError as exc:
        logger.error("Match #%s rolled back: %s", payload.match_no, exc)
        raise PersistenceError("Failed to record match.") from exc

    logger.info("Recorded match #%s as %s with %d performances",
                payload.match_no, match_id, len(payload.player_performances))
    return match_id
