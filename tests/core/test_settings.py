"""Tests for modelspine.core.settings."""

import pytest
from pydantic import ValidationError

from modelspine.core.settings import ModelSpineSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "DATABASE_URL",
        "TURSO_AUTH_TOKEN",
        "MODELSPINE_DATABASE_URL",
        "MODELSPINE_AUTH_TOKEN",
        "MODELSPINE_POOL_SIZE",
        "MODELSPINE_LOG_LEVEL",
        "MODELSPINE_JSON_LOGS",
    ):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        settings = ModelSpineSettings(_env_file=None)
        assert settings.database_url == "sqlite://:memory:"
        assert settings.auth_token is None
        assert settings.pool_size == 5
        assert settings.connect_timeout == 10.0
        assert settings.log_level == "INFO"
        assert settings.json_logs is None


class TestEnvironment:
    def test_database_url_is_unprefixed(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://app@db:5432/app")
        assert ModelSpineSettings(_env_file=None).database_url == "postgresql://app@db:5432/app"

    def test_prefixed_database_url_also_works(self, monkeypatch):
        monkeypatch.setenv("MODELSPINE_DATABASE_URL", "mysql://root@localhost/app")
        assert ModelSpineSettings(_env_file=None).database_url == "mysql://root@localhost/app"

    def test_turso_token(self, monkeypatch):
        monkeypatch.setenv("TURSO_AUTH_TOKEN", "secret")
        assert ModelSpineSettings(_env_file=None).auth_token == "secret"

    def test_prefixed_fields(self, monkeypatch):
        monkeypatch.setenv("MODELSPINE_POOL_SIZE", "12")
        monkeypatch.setenv("MODELSPINE_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("MODELSPINE_JSON_LOGS", "true")
        settings = ModelSpineSettings(_env_file=None)
        assert settings.pool_size == 12
        assert settings.log_level == "DEBUG"
        assert settings.json_logs is True

    def test_invalid_pool_size(self, monkeypatch):
        monkeypatch.setenv("MODELSPINE_POOL_SIZE", "0")
        with pytest.raises(ValidationError):
            ModelSpineSettings(_env_file=None)

    def test_init_by_field_name(self):
        settings = ModelSpineSettings(_env_file=None, database_url="sqlite:///app.db")
        assert settings.database_url == "sqlite:///app.db"
