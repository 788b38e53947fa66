"""Configuration — tests for environment-driven settings."""

from squirreldb.config import Settings, database_url_for, get_settings
from squirreldb.core.domain_types import MirrorPolicy


def test_defaults(monkeypatch):
    for var in ("SQUIRRELDB_FILE_PATH", "SQUIRRELDB_MIRROR_POLICY"):
        monkeypatch.delenv(var, raising=False)
    settings = Settings(_env_file=None)
    assert settings.file_path == "db.sqlite"
    assert settings.mirror_policy is MirrorPolicy.SEQUENTIAL
    assert settings.database_url == "sqlite+aiosqlite:///db.sqlite"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SQUIRRELDB_FILE_PATH", ":memory:")
    monkeypatch.setenv("SQUIRRELDB_MIRROR_POLICY", "PARALLEL")
    settings = get_settings()
    assert settings.file_path == ":memory:"
    assert settings.mirror_policy is MirrorPolicy.PARALLEL


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_database_url_for_absolute_path():
    assert database_url_for("/tmp/x.sqlite") == "sqlite+aiosqlite:////tmp/x.sqlite"
