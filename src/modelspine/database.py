"""
Database facade: one object that owns the adapter, session and migrator.

``Database`` is the entry point applications usually touch.  It builds
the right adapter from a URL (or from ``DATABASE_URL`` via settings),
connects it, and exposes the ``Session`` verbs and the ``Migrator``.

Examples:
    >>> async with await Database.connect("sqlite://:memory:") as db:
    ...     (await db.migrate()).unwrap()
    ...     user = (await db.session.create(User, name="Jane", age=28)).unwrap()

    Reading the URL from the environment:

    >>> db = await Database.connect()          # DATABASE_URL
    >>> await db.close()

Tags:
    database, facade, lifecycle, modelspine
"""

from __future__ import annotations

from typing import Any

from modelspine.core.adapters import DatabaseAdapter, adapter_from_url
from modelspine.core.dialect import Dialect
from modelspine.core.logging import configure_logging
from modelspine.core.migrations import MigrationResult, Migrator
from modelspine.core.result import Result
from modelspine.core.settings import ModelSpineSettings
from modelspine.orm.registry import ModelRegistry
from modelspine.orm.registry import registry as default_registry
from modelspine.orm.session import Session


class Database:
    """Connected adapter plus the session and migrator bound to it."""

    def __init__(self, adapter: DatabaseAdapter, *, registry: ModelRegistry | None = None):
        self._adapter = adapter
        self._registry = registry if registry is not None else default_registry
        self._session = Session(adapter, registry=self._registry)
        self._migrator = Migrator(adapter)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        registry: ModelRegistry | None = None,
        **options: Any,
    ) -> Database:
        """Build (without connecting) from a database URL.

        ``options`` override parsed ``DatabaseConfig`` fields, e.g.
        ``auth_token=`` for Turso or ``pool_size=`` for PostgreSQL.
        """
        return cls(adapter_from_url(url, **options), registry=registry)

    @classmethod
    def from_settings(
        cls,
        settings: ModelSpineSettings | None = None,
        *,
        registry: ModelRegistry | None = None,
    ) -> Database:
        """Build (without connecting) from environment settings.

        Also applies the logging settings (``MODELSPINE_LOG_LEVEL``,
        ``MODELSPINE_JSON_LOGS``).
        """
        settings = settings or ModelSpineSettings()
        configure_logging(level=settings.log_level, json_format=settings.json_logs)
        options: dict[str, Any] = {
            "pool_size": settings.pool_size,
            "connect_timeout": settings.connect_timeout,
        }
        if settings.auth_token:
            options["auth_token"] = settings.auth_token
        return cls.from_url(settings.database_url, registry=registry, **options)

    @classmethod
    async def connect(
        cls,
        url: str | None = None,
        *,
        registry: ModelRegistry | None = None,
        **options: Any,
    ) -> Database:
        """Build and connect; without ``url`` the settings decide.

        Raises:
            ConfigError: Unknown URL scheme or missing driver.
            DatabaseConnectionError: The driver could not connect.
        """
        if url is None:
            db = cls.from_settings(registry=registry)
        else:
            db = cls.from_url(url, registry=registry, **options)
        await db.open()
        return db

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        await self._adapter.connect()

    async def close(self) -> None:
        await self._adapter.disconnect()

    async def __aenter__(self) -> Database:
        if not self._adapter.is_connected:
            await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    @property
    def dialect(self) -> Dialect:
        return self._adapter.dialect

    @property
    def session(self) -> Session:
        return self._session

    @property
    def migrator(self) -> Migrator:
        return self._migrator

    @property
    def registry(self) -> ModelRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def migrate(self) -> Result[MigrationResult]:
        """Create every missing table of the registry (never drops)."""
        return await self._migrator.migrate(self._registry)

    async def add_column(self, model: Any, field_name: str) -> Result[str]:
        """Explicitly add one column of an already-created model table."""
        return await self._migrator.add_column(self._registry.describe(model), field_name)


__all__ = ["Database"]
