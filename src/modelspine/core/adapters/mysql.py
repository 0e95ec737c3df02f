"""MySQL database adapter.

Uses the asyncio API (``mysql.connector.aio``) of the
``mysql-connector-python`` package.  MySQL uses **format** (``%s``)
placeholder style.

Install the driver::

    pip install mysql-connector-python

This adapter is import-guarded: if ``mysql.connector`` is not installed
a clear :class:`~modelspine.core.errors.ConfigError` is raised at
``connect()`` time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from modelspine.core.errors import ConfigError, DatabaseConnectionError
from modelspine.core.protocols import ExecuteResult

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB database adapter.

    One autocommit connection; an ``asyncio.Lock`` keeps concurrent
    callers from interleaving statements on it.  The connection reports
    matched (not changed) rows, so an UPDATE that rewrites identical
    values still counts as a hit.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        charset: str = "utf8mb4",
        connect_timeout: float = 10.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MYSQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            connect_timeout=connect_timeout,
            options={**(kwargs or {}), "charset": charset},
        )
        super().__init__(config)
        self._conn: Any = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> MySQLAdapter:
        return cls(
            host=config.host,
            port=config.port or 3306,
            database=config.database,
            username=config.username,
            password=config.password,
            connect_timeout=config.connect_timeout,
            **config.options,
        )

    async def connect(self) -> None:
        """Connect to MySQL database."""
        if self._conn is not None:
            return
        try:
            from mysql.connector.aio import connect
            from mysql.connector.constants import ClientFlag
        except ImportError:
            raise ConfigError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install mysql-connector-python"
            ) from None

        options = dict(self._config.options)
        try:
            self._conn = await connect(
                host=self._config.host,
                port=self._config.port,
                database=self._config.database or None,
                user=self._config.username,
                password=self._config.password or "",
                charset=options.pop("charset", "utf8mb4"),
                connect_timeout=int(self._config.connect_timeout),
                autocommit=True,
                client_flags=[ClientFlag.FOUND_ROWS],
                **options,
            )
        except Exception as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ) from e
        self._mark_connected(host=self._config.host, database=self._config.database)

    async def disconnect(self) -> None:
        """Close the MySQL connection."""
        if self._conn is not None:
            async with self._lock:
                await self._conn.close()
            self._conn = None
            self._mark_disconnected()

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute query and return results as dicts."""
        self._require_connection()
        async with self._lock:
            cursor = await self._conn.cursor(dictionary=True)
            try:
                await cursor.execute(sql, tuple(params))
                rows = await cursor.fetchall()
            finally:
                await cursor.close()
        return [dict(row) for row in rows]

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        self._require_connection()
        async with self._lock:
            cursor = await self._conn.cursor()
            try:
                await cursor.execute(sql, tuple(params))
                return ExecuteResult(
                    rows_affected=max(cursor.rowcount or 0, 0),
                    last_insert_id=cursor.lastrowid or None,
                )
            finally:
                await cursor.close()


__all__ = [
    "MySQLAdapter",
]
