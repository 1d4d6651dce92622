import pytest
from app.core import config
from app.domain.exceptions import ConfigurationError


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setattr(config, "get_secret", lambda name: {"db_password": "pw", "secret_key": "k"}.get(name))
    monkeypatch.setenv("POSTGRES_USER", "pricing")
    monkeypatch.setenv("POSTGRES_DB", "pricing")
    monkeypatch.delenv("DB_HOST", raising=False)
    monkeypatch.delenv("PRICING_CACHE_MAX_AGE", raising=False)
    return monkeypatch


def test_load_settings_builds_database_url(env):
    env.setenv("LOG_LEVEL", "debug")

    settings = config.load_settings()

    assert settings.database_url == "postgresql+asyncpg://pricing:pw@localhost:5432/pricing"
    assert settings.log_level == "DEBUG"
    assert settings.pricing_cache_max_age == 300


def test_load_settings_reports_missing_values(env):
    env.delenv("POSTGRES_DB")

    with pytest.raises(ConfigurationError) as e:
        config.load_settings()

    assert e.value.ctx == {"missing": "['POSTGRES_DB']"}
