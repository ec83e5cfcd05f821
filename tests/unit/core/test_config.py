import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from pgdocstore.core.config import Settings, get_settings


def test_settings_defaults():
    """Test that settings load with correct defaults."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {}, clear=True):
        settings = Settings(_env_file=None)

    assert settings.environment == "development"
    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_schema == "public"
    assert settings.default_page_size == 50
    assert settings.is_development is True
    assert settings.is_production is False
    assert settings.is_testing is False


def test_settings_env_override():
    """Test that environment variables override defaults."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {
        "PGDOCSTORE_DB_HOST": "db.internal",
        "PGDOCSTORE_DB_PORT": "6543",
        "PGDOCSTORE_DB_NAME": "library",
        "PGDOCSTORE_ENVIRONMENT": "production",
    }):
        settings = Settings(_env_file=None)

        assert settings.db_host == "db.internal"
        assert settings.db_port == 6543
        assert settings.db_name == "library"
        assert settings.is_production is True


def test_database_url():
    settings = Settings(
        _env_file=None,
        db_host="pg",
        db_port=5433,
        db_name="content",
        db_user="api",
        db_password="s3cret",
    )

    url = settings.database_url

    assert url.drivername == "postgresql+asyncpg"
    assert url.host == "pg"
    assert url.port == 5433
    assert url.database == "content"
    assert url.username == "api"
    assert url.password == "s3cret"
    assert "s3cret" not in url.render_as_string(hide_password=True)


def test_page_size_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, default_page_size=0)


def test_get_settings_is_cached():
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()
