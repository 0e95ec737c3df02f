"""Tests for the Database facade."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from modelspine import Database, ModelSpineSettings, kwargs
from modelspine.core.adapters import PostgreSQLAdapter, SQLiteAdapter, TursoAdapter
from modelspine.core.errors import ConfigError, UnsupportedOperationError
from modelspine.core.migrations import MigrationResult
from tests._support.models import Profile, User, make_registry


@pytest.fixture(autouse=True)
def logging_setup():
    """Record logging configuration instead of reconfiguring structlog."""
    with patch("modelspine.database.configure_logging") as configure:
        yield configure


class TestConstruction:
    def test_from_url_does_not_connect(self):
        db = Database.from_url("sqlite://:memory:", registry=make_registry())
        assert isinstance(db.adapter, SQLiteAdapter)
        assert db.adapter.is_connected is False
        assert db.dialect.name == "sqlite"

    def test_from_url_passes_options(self):
        db = Database.from_url("libsql://db-acme.turso.io", auth_token="tok")
        assert isinstance(db.adapter, TursoAdapter)
        assert db.adapter.config.auth_token == "tok"

    def test_from_settings(self, logging_setup):
        settings = ModelSpineSettings(
            _env_file=None,
            database_url="postgresql://app@db/prod",
            pool_size=11,
            connect_timeout=4.0,
        )
        db = Database.from_settings(settings)
        assert isinstance(db.adapter, PostgreSQLAdapter)
        assert db.adapter.config.pool_size == 11
        assert db.adapter.config.connect_timeout == 4.0
        assert logging_setup.call_count == 1

    def test_from_settings_applies_logging_settings(self, logging_setup):
        settings = ModelSpineSettings(
            _env_file=None,
            database_url="sqlite://:memory:",
            log_level="DEBUG",
            json_logs=True,
        )

        Database.from_settings(settings)

        logging_setup.assert_called_once_with(level="DEBUG", json_format=True)

    def test_from_url_leaves_logging_alone(self, logging_setup):
        Database.from_url("sqlite://:memory:")
        logging_setup.assert_not_called()

    def test_unknown_scheme(self):
        with pytest.raises(ConfigError):
            Database.from_url("oracle://db/app")

    def test_default_registry_is_process_wide(self):
        from modelspine.orm import registry

        assert Database.from_url("sqlite://:memory:").registry is registry


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_connect_from_environment(self, monkeypatch, logging_setup):
        monkeypatch.setenv("DATABASE_URL", "sqlite://:memory:")
        monkeypatch.setenv("MODELSPINE_LOG_LEVEL", "WARNING")
        db = await Database.connect(registry=make_registry())
        try:
            assert db.adapter.is_connected is True
            logging_setup.assert_called_once_with(level="WARNING", json_format=None)
        finally:
            await db.close()
        assert db.adapter.is_connected is False

    @pytest.mark.asyncio
    async def test_context_manager_end_to_end(self):
        async with Database.from_url("sqlite://:memory:", registry=make_registry()) as db:
            migration = (await db.migrate()).unwrap()
            assert isinstance(migration, MigrationResult)
            assert migration.applied == ["user", "profile", "event"]

            jane = (await db.session.create(User, name="Jane", age=28)).unwrap()
            (await db.session.create(Profile, user_id=jane.id)).unwrap()
            found = (await db.session.get(User, kwargs(name="Jane"))).unwrap()
            assert found == jane
        assert db.adapter.is_connected is False

    @pytest.mark.asyncio
    async def test_connect_then_enter_does_not_reconnect(self):
        db = await Database.connect("sqlite://:memory:", registry=make_registry())
        async with db:
            (await db.migrate()).unwrap()
            assert (await db.migrator.table_exists("user")) is True


class TestSchemaHelpers:
    @pytest.mark.asyncio
    async def test_add_column_goes_through_registry(self, db):
        result = await db.add_column(User, "name")
        assert isinstance(result.unwrap_err(), UnsupportedOperationError)
