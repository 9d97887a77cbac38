"""Tests for startup configuration loading."""

import pytest

from coallytasks.config import DEFAULT_DATABASE_URL, load_settings
from coallytasks.errors import ConfigurationError


def test_missing_secret_fails_fast():
    with pytest.raises(ConfigurationError):
        load_settings({"DATABASE_URL": "sqlite://"})


def test_defaults():
    settings = load_settings({"JWT_SECRET": "s"})

    assert settings.database_url == DEFAULT_DATABASE_URL
    assert settings.port == 3000
    assert settings.bcrypt_rounds == 10
    assert settings.cors_origins == ["*"]
    assert settings.debug is False


def test_reads_environment_values():
    settings = load_settings({
        "JWT_SECRET": "s",
        "DBO": "postgresql://u:p@db/tasks",
        "PORT": "8080",
        "DEBUG": "true",
        "CORS_ORIGINS": "http://a.com, http://b.com",
    })

    assert settings.database_url == "postgresql://u:p@db/tasks"
    assert settings.port == 8080
    assert settings.debug is True
    assert settings.cors_origins == ["http://a.com", "http://b.com"]


def test_database_url_wins_over_legacy_name():
    settings = load_settings({"JWT_SECRET": "s", "DATABASE_URL": "sqlite://", "DBO": "ignored"})
    assert settings.database_url == "sqlite://"


def test_invalid_number_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        load_settings({"JWT_SECRET": "s", "PORT": "eighty"})


def test_settings_are_immutable():
    settings = load_settings({"JWT_SECRET": "s"})
    with pytest.raises(Exception):
        settings.jwt_secret = "other"


def test_alembic_ini_location():
    assert load_settings({"JWT_SECRET": "s"}).alembic_ini == "alembic.ini"
    assert load_settings({"JWT_SECRET": "s", "ALEMBIC_INI": "/srv/app/alembic.ini"}).alembic_ini == "/srv/app/alembic.ini"
