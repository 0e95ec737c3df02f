"""Database adapter registry and factory.

Manifesto:
    Consumers should never hard-code adapter class names.  The registry
    maps ``DatabaseType`` strings to adapter classes, and the factories
    build a configured (not yet connected) instance from keyword
    arguments, a ``DatabaseConfig`` or a URL.

Features:
    - ``AdapterRegistry`` singleton with pre-registered defaults
    - ``register()`` for custom / third-party adapters
    - ``get_adapter()``: type + kwargs → adapter
    - ``adapter_from_url()``: ``DATABASE_URL`` → adapter

Tags:
    modelspine, database, registry, factory, singleton
"""

from __future__ import annotations

from typing import Any

from modelspine.core.errors import ConfigError

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter
from .turso import TursoAdapter
from .types import DatabaseConfig, DatabaseType


class AdapterRegistry:
    """
    Registry for database adapter factories.

    Pre-registered adapters:
    - ``sqlite``: :class:`SQLiteAdapter`
    - ``postgresql`` / ``postgres``: :class:`PostgreSQLAdapter`
    - ``mysql``: :class:`MySQLAdapter`
    - ``turso`` / ``libsql``: :class:`TursoAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["sqlite"] = SQLiteAdapter
        self._factories["postgresql"] = PostgreSQLAdapter
        self._factories["postgres"] = PostgreSQLAdapter  # Alias
        self._factories["mysql"] = MySQLAdapter
        self._factories["turso"] = TursoAdapter
        self._factories["libsql"] = TursoAdapter  # Alias

    def register(self, name: str, adapter_class: type[DatabaseAdapter]) -> None:
        """Register an adapter factory."""
        self._factories[name.lower()] = adapter_class

    def resolve(self, name: str) -> type[DatabaseAdapter]:
        name = name.lower()
        if name not in self._factories:
            raise ConfigError(f"Unknown database adapter: {name}")
        return self._factories[name]

    def create(self, name: str, **kwargs: Any) -> DatabaseAdapter:
        """Create an adapter by name."""
        return self.resolve(name)(**kwargs)

    def from_config(self, config: DatabaseConfig) -> DatabaseAdapter:
        return self.resolve(config.db_type.value).from_config(config)

    def list_adapters(self) -> list[str]:
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


def get_adapter(
    db_type: DatabaseType | str,
    **kwargs: Any,
) -> DatabaseAdapter:
    """
    Get a database adapter by type.

    Usage:
        adapter = get_adapter(DatabaseType.SQLITE, path="data.db")
        adapter = get_adapter("postgresql", host="localhost", database="app")
    """
    if isinstance(db_type, DatabaseType):
        name = db_type.value
    else:
        name = db_type

    return adapter_registry.create(name, **kwargs)


def adapter_from_url(url: str, **overrides: Any) -> DatabaseAdapter:
    """
    Build an adapter from a database URL.

    Usage:
        adapter = adapter_from_url("sqlite://:memory:")
        adapter = adapter_from_url("libsql://db-org.turso.io", auth_token=token)
    """
    return adapter_registry.from_config(DatabaseConfig.from_url(url, **overrides))


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "adapter_from_url",
]
