"""
Test suite for environment driven settings.
"""

import logging

import pytest
from pydantic import ValidationError as PydanticValidationError

from cenov_admin.configs import get_settings
from cenov_admin.configs.auth import AuthSettings
from cenov_admin.configs.base import BaseSettings
from cenov_admin.configs.database import DatabaseSettings, to_async_url
from cenov_admin.configs.imports import ImportSettings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.parametrize(
    "url,expected",
    [
        ("postgres://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql+psycopg2://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("postgresql+asyncpg://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
    ],
)
def test_to_async_url(url: str, expected: str) -> None:
    assert to_async_url(url) == expected


def test_database_urls_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("CENOV_DEV_DATABASE_URL", "postgresql://dev:pw@db:5432/cenov_dev")

    urls = DatabaseSettings().urls

    assert set(urls) == {"cenov", "cenov_dev", "cenov_preprod"}
    assert urls["cenov_dev"] == "postgresql+asyncpg://dev:pw@db:5432/cenov_dev"


def test_invalid_database_url(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "localhost")

    with pytest.raises(PydanticValidationError):
        DatabaseSettings()


@pytest.mark.parametrize(
    "name,level",
    [("trace", logging.DEBUG), ("warn", logging.WARNING), ("fatal", logging.CRITICAL)],
)
def test_log_level_names(monkeypatch, name: str, level: int) -> None:
    monkeypatch.setenv("LOG_LEVEL", name)

    assert BaseSettings().logging_level == level


def test_unknown_log_level_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    with pytest.raises(PydanticValidationError):
        BaseSettings()


def test_short_cookie_key_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_LOGTO_COOKIE_ENCRYPTION_KEY", "court")

    with pytest.raises(PydanticValidationError):
        AuthSettings()


def test_import_timeouts(monkeypatch) -> None:
    monkeypatch.setenv("IMPORT_TRANSACTION_TIMEOUT", "120")

    settings = ImportSettings()

    assert settings.transaction_timeout == 120.0
    assert settings.max_wait == 10.0


def test_get_settings_is_cached(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_LOGTO_USER_HEADER", "X-Auth-User")

    settings = get_settings()

    assert settings.auth.user_header == "X-Auth-User"
    assert get_settings() is settings
