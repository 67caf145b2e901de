import pytest

from repe.core.config import Settings
from repe.core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _no_env_database(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)


def _settings(**kwargs):
    return Settings(_env_file=None, **kwargs)


@pytest.mark.parametrize(
    "url, sync_url, async_url",
    [
        (
            "postgres://u:p@db:5432/repe",
            "postgresql://u:p@db:5432/repe",
            "postgresql+asyncpg://u:p@db:5432/repe",
        ),
        (
            "postgresql+asyncpg://u:p@db/repe",
            "postgresql://u:p@db/repe",
            "postgresql+asyncpg://u:p@db/repe",
        ),
        ("sqlite:///./repe.db", "sqlite:///./repe.db", "sqlite+aiosqlite:///./repe.db"),
    ],
)
def test_database_url_variants(url, sync_url, async_url):
    settings = _settings(database_url=url)

    assert settings.sync_database_url == sync_url
    assert settings.async_database_url == async_url


def test_missing_database_url_fails_on_use():
    settings = _settings()

    with pytest.raises(ConfigurationError):
        settings.async_database_url


def test_env_vars_are_case_insensitive(monkeypatch):
    monkeypatch.setenv("database_url", "sqlite:///x.db")
    monkeypatch.setenv("API_PREFIX", "/v2")

    settings = _settings()

    assert settings.database_url == "sqlite:///x.db"
    assert settings.api_prefix == "/v2"
