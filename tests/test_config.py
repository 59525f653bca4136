"""Tests for settings."""

from app.config import Settings


def test_database_url_from_components():
    settings = Settings(
        db_url="",
        db_user="catalog",
        db_password="pw",
        db_host="db",
        db_port=5433,
        db_name="shop",
    )
    assert settings.database_url == "postgresql+asyncpg://catalog:pw@db:5433/shop"


def test_database_url_override():
    settings = Settings(db_url="sqlite+aiosqlite:///./catalog.db")
    assert settings.database_url == "sqlite+aiosqlite:///./catalog.db"


def test_taxonomy_defaults():
    settings = Settings(_env_file=None)
    assert settings.cache_ttl_seconds == 86400
    assert settings.delete_sample_size == 10
    assert settings.taxonomy_max_depth == 64
