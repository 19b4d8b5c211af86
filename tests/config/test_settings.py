"""Settings — environment overrides, URL rewriting and tag colour validation."""

import pytest
from pydantic import ValidationError

from taskboard.config import Settings, get_settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.default_tag_color == "#3498db"
    assert settings.database_pool_size == 20


def test_postgres_url_rewritten_for_asyncpg():
    settings = Settings(database_url="postgresql://u:p@db:5432/tasks")
    assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/tasks"


def test_sqlite_url_untouched():
    url = "sqlite+aiosqlite:///:memory:"
    assert Settings(database_url=url).database_url == url


def test_environment_override(monkeypatch):
    monkeypatch.setenv("TASKBOARD_LOG_LEVEL", "DEBUG")
    assert Settings().log_level == "DEBUG"


def test_invalid_default_tag_color_rejected():
    with pytest.raises(ValidationError):
        Settings(default_tag_color="blue")


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
