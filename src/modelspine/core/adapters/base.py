"""Database adapter base class.

Manifesto:
    All database adapters share a common lifecycle (connect/disconnect),
    the two execution calls the engine needs, and dialect management.
    The abstract base class defines the contract so the session and the
    migrator never depend on a specific database vendor.

Features:
    - Abstract async ``connect()``, ``disconnect()``, ``fetch_all()``, ``execute()``
    - Property-based dialect and connection-state introspection
    - Async context-manager protocol for connection lifecycle
    - Config-driven construction from ``DatabaseConfig``

Tags:
    modelspine, database, abstract-base, adapter-pattern, async
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from modelspine.core.dialect import Dialect, get_dialect
from modelspine.core.errors import ConfigError
from modelspine.core.logging import get_logger
from modelspine.core.protocols import ExecuteResult

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class DatabaseAdapter(ABC):
    """
    Abstract base class for async database adapters.

    Subclasses satisfy :class:`~modelspine.core.protocols.AsyncExecutor`.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @classmethod
    @abstractmethod
    def from_config(cls, config: DatabaseConfig) -> DatabaseAdapter:
        """Build an adapter from a parsed configuration."""
        ...

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._connected

    @abstractmethod
    async def connect(self) -> None:
        """Establish the connection (or pool)."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the connection (or pool)."""
        ...

    @abstractmethod
    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run a row-returning statement; rows are dicts keyed by column label."""
        ...

    @abstractmethod
    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        """Run a statement and commit it."""
        ...

    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        rows = await self.fetch_all(sql, params)
        return rows[0] if rows else None

    def _require_connection(self) -> None:
        if not self._connected:
            raise ConfigError(
                f"{type(self).__name__} is not connected; await connect() first"
            )

    def _mark_connected(self, **details: Any) -> None:
        self._connected = True
        logger.info("adapter.connected", dialect=self._dialect.name, **details)

    def _mark_disconnected(self) -> None:
        self._connected = False
        logger.info("adapter.disconnected", dialect=self._dialect.name)

    async def __aenter__(self) -> DatabaseAdapter:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()


__all__ = [
    "DatabaseAdapter",
]
