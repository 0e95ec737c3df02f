"""Tests for adapter types, URL parsing and the adapter registry."""

from __future__ import annotations

import pytest

from modelspine.core.adapters import (
    AdapterRegistry,
    DatabaseConfig,
    DatabaseType,
    MySQLAdapter,
    PostgreSQLAdapter,
    SQLiteAdapter,
    TursoAdapter,
    adapter_from_url,
    adapter_registry,
    get_adapter,
)
from modelspine.core.errors import ConfigError


class TestDatabaseConfigFromUrl:
    @pytest.mark.parametrize(
        "url, path",
        [
            ("sqlite://:memory:", ":memory:"),
            ("sqlite://", ":memory:"),
            ("sqlite:///app.db", "app.db"),
            ("sqlite:////var/data/app.db", "/var/data/app.db"),
            ("sqlite://main.db", "main.db"),
        ],
    )
    def test_sqlite(self, url, path):
        config = DatabaseConfig.from_url(url)
        assert config.db_type == DatabaseType.SQLITE
        assert config.path == path

    @pytest.mark.parametrize(
        "url",
        [
            "postgresql://app:s%40cret@db:6543/prod",
            "postgres://app:s%40cret@db:6543/prod",
            "postgresql+asyncpg://app:s%40cret@db:6543/prod",
        ],
    )
    def test_postgresql(self, url):
        config = DatabaseConfig.from_url(url)
        assert config.db_type == DatabaseType.POSTGRESQL
        assert config.host == "db"
        assert config.port == 6543
        assert config.database == "prod"
        assert config.username == "app"
        assert config.password == "s@cret"

    def test_default_ports(self):
        assert DatabaseConfig.from_url("postgresql://db/app").port == 5432
        assert DatabaseConfig.from_url("mysql://db/app").port == 3306

    def test_mysql(self):
        config = DatabaseConfig.from_url("mysql+mysqlconnector://root@localhost/shop")
        assert config.db_type == DatabaseType.MYSQL
        assert config.username == "root"
        assert config.password is None
        assert config.database == "shop"

    def test_turso(self):
        libsql = DatabaseConfig.from_url("libsql://db-acme.turso.io", auth_token="tok")
        assert libsql.db_type == DatabaseType.TURSO
        assert libsql.url == "https://db-acme.turso.io"
        assert libsql.auth_token == "tok"

        https = DatabaseConfig.from_url("https://db-acme.turso.io")
        assert https.db_type == DatabaseType.TURSO

    @pytest.mark.parametrize(
        "url",
        ["", "no-scheme", "oracle://db/app", "https://example.com/db", "mysql://db:notaport/x"],
    )
    def test_invalid(self, url):
        with pytest.raises(ConfigError):
            DatabaseConfig.from_url(url)

    def test_overrides(self):
        config = DatabaseConfig.from_url("postgresql://db/app", pool_size=20, connect_timeout=3.0)
        assert config.pool_size == 20
        assert config.connect_timeout == 3.0


class TestConnectionString:
    def test_round_trip_shapes(self):
        assert DatabaseConfig(path="app.db").to_connection_string() == "app.db"
        pg = DatabaseConfig(
            db_type=DatabaseType.POSTGRESQL, host="db", database="app", username="u", password="p"
        )
        assert pg.to_connection_string() == "postgresql://u:p@db:5432/app"
        my = DatabaseConfig(db_type=DatabaseType.MYSQL, host="db", database="app")
        assert my.to_connection_string() == "mysql://db:3306/app"

    def test_turso_needs_url(self):
        with pytest.raises(ConfigError):
            DatabaseConfig(db_type=DatabaseType.TURSO).to_connection_string()


class TestAdapterRegistry:
    def test_defaults_registered(self):
        assert adapter_registry.list_adapters() == [
            "libsql",
            "mysql",
            "postgres",
            "postgresql",
            "sqlite",
            "turso",
        ]

    def test_create_by_name(self):
        adapter = get_adapter("sqlite", path=":memory:")
        assert isinstance(adapter, SQLiteAdapter)
        assert isinstance(get_adapter(DatabaseType.POSTGRESQL, database="app"), PostgreSQLAdapter)

    def test_unknown_name(self):
        with pytest.raises(ConfigError, match="Unknown database adapter"):
            AdapterRegistry().resolve("oracle")

    def test_register_custom(self):
        class MemoryAdapter(SQLiteAdapter):
            pass

        registry = AdapterRegistry()
        registry.register("Memory", MemoryAdapter)
        assert registry.resolve("memory") is MemoryAdapter

    @pytest.mark.parametrize(
        "url, adapter_type",
        [
            ("sqlite://:memory:", SQLiteAdapter),
            ("postgres://db/app", PostgreSQLAdapter),
            ("mysql://db/app", MySQLAdapter),
            ("libsql://db-acme.turso.io", TursoAdapter),
        ],
    )
    def test_adapter_from_url(self, url, adapter_type):
        adapter = adapter_from_url(url)
        assert isinstance(adapter, adapter_type)
        assert adapter.is_connected is False
