"""Store Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be overridden with a SQUIRRELDB_* environment variable
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults work out of the box: a file called db.sqlite in the working directory
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from squirreldb.core.domain_types import MirrorPolicy


class Settings(BaseSettings):
    """Store settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="SQUIRRELDB_", case_sensitive=False,
        extra="ignore",
    )

    # Storage
    file_path: str = "db.sqlite"
    echo_sql: bool = False

    # Mirroring
    mirror_policy: MirrorPolicy = MirrorPolicy.SEQUENTIAL

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("mirror_policy", mode="before")
    @classmethod
    def lowercase_policy(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def database_url(self) -> str:
        return database_url_for(self.file_path)


def database_url_for(file_path: str) -> str:
    """SQLAlchemy URL for a SQLite file (or :memory:) on the aiosqlite driver."""
    return f"sqlite+aiosqlite:///{file_path}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
