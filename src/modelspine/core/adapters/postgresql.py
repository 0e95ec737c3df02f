"""PostgreSQL database adapter (asyncpg pool)."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from modelspine.core.errors import ConfigError, DatabaseConnectionError
from modelspine.core.protocols import ExecuteResult

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


def normalize_database_url(url: str) -> str:
    """Normalize database URL for asyncpg compatibility.

    Converts SQLAlchemy-style URLs (postgresql+asyncpg://) to plain
    PostgreSQL URLs and removes the ``sslmode`` query parameter.

    Examples:
        >>> normalize_database_url("postgresql+asyncpg://localhost/db")
        'postgresql://localhost/db'
        >>> normalize_database_url("postgresql://localhost/db?sslmode=require")
        'postgresql://localhost/db'
    """
    if url.startswith("postgresql+asyncpg://"):
        url = url.replace("postgresql+asyncpg://", "postgresql://", 1)

    if "?sslmode=" in url or "&sslmode=" in url:
        url = re.sub(r"[?&]sslmode=[^&]*", "", url)
        url = url.rstrip("?&")

    return url


def rows_from_status(status: str | None) -> int:
    """Affected-row count from a command tag (``"UPDATE 2"`` → 2).

    Tags without a count (``"CREATE TABLE"``) give 0.
    """
    if not status:
        return 0
    last = status.rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL database adapter.

    Holds an ``asyncpg`` pool; every call acquires a connection, runs one
    statement in autocommit mode, and releases it.  ``INSERT`` statements
    carry ``RETURNING`` so generated keys come back as rows.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        dsn: str | None = None,
        pool_size: int = 5,
        connect_timeout: float = 10.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.POSTGRESQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            pool_size=pool_size,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._dsn = normalize_database_url(dsn) if dsn else None
        self._pool: Any = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> PostgreSQLAdapter:
        return cls(
            host=config.host,
            port=config.port or 5432,
            database=config.database,
            username=config.username,
            password=config.password,
            pool_size=config.pool_size,
            connect_timeout=config.connect_timeout,
            **config.options,
        )

    async def connect(self) -> None:
        """Create the connection pool."""
        if self._pool is not None:
            return
        try:
            import asyncpg
        except ImportError:
            raise ConfigError(
                "asyncpg is required for PostgreSQL. Install with: pip install asyncpg"
            ) from None

        try:
            if self._dsn:
                target: dict[str, Any] = {"dsn": self._dsn}
            else:
                target = {
                    "host": self._config.host,
                    "port": self._config.port,
                    "database": self._config.database or None,
                    "user": self._config.username,
                    "password": self._config.password,
                }
            self._pool = await asyncpg.create_pool(
                **target,
                min_size=1,
                max_size=self._config.pool_size,
                timeout=self._config.connect_timeout,
                **self._config.options,
            )
        except (OSError, asyncpg.PostgresError) as e:
            raise DatabaseConnectionError(
                f"Failed to connect to PostgreSQL: {e}",
                cause=e,
            ) from e
        self._mark_connected(host=self._config.host, database=self._config.database)

    async def disconnect(self) -> None:
        """Close the pool, waiting for connections to be released."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            self._mark_disconnected()

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        self._require_connection()
        async with self._pool.acquire() as conn:
            records = await conn.fetch(sql, *params)
        return [dict(record) for record in records]

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        self._require_connection()
        async with self._pool.acquire() as conn:
            status = await conn.execute(sql, *params)
        return ExecuteResult(rows_affected=rows_from_status(status))


__all__ = [
    "PostgreSQLAdapter",
    "normalize_database_url",
    "rows_from_status",
]
