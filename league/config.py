"""Configuration management for the league tracker."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_ROOT = Path(__file__).resolve().parent.parent

DRIVERS = {
    "postgresql": ("postgresql+psycopg2", 5432),
    "mysql": ("mysql+mysqlconnector", 3306),
}


class DatabaseSettings(BaseSettings):
    """Database configuration settings (``DB_*`` environment variables)."""

    model_config = SettingsConfigDict(env_prefix="DB_", env_file=".env", extra="ignore")

    dialect: str = "sqlite"
    host: str = "localhost"
    port: Optional[int] = None
    name: str = "cricket_league"
    user: str = "league"
    password: str = ""

    pool_size: int = 5
    pool_recycle: int = 3600
    echo: bool = False

    @property
    def url(self) -> str:
        """Get database URL for SQLAlchemy."""
        if self.dialect == "sqlite":
            return f"sqlite:///{PACKAGE_ROOT / (self.name + '.db')}"
        if self.dialect not in DRIVERS:
            raise ValueError(f"Unsupported database dialect: {self.dialect}")
        driver, default_port = DRIVERS[self.dialect]
        return f"{driver}://{self.user}:{self.password}@{self.host}:{self.port or default_port}/{self.name}"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    # Full SQLAlchemy URL; wins over the DB_* parts when set
    database_url: Optional[str] = None

    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    static_dir: Path = PACKAGE_ROOT / "public"
    log_level: str = "INFO"
    cors_origins: str = "*"

    # League rules
    enforce_score_breakdown: bool = True
    leaderboard_limit: int = Field(default=10, ge=1)
    recent_matches_limit: int = Field(default=5, ge=1)

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or self.database.url
