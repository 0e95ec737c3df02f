"""SQLite database adapter (aiosqlite)."""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from typing import Any

from modelspine.core.errors import ConfigError, DatabaseConnectionError
from modelspine.core.protocols import ExecuteResult

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses ``aiosqlite``, which runs one ``sqlite3`` connection on a worker
    thread and serialises calls on it.  Suitable for:
    - Development and testing (``:memory:``)
    - Single-process applications
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            connect_timeout=timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._conn: Any = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> SQLiteAdapter:
        return cls(config.path or ":memory:", timeout=config.connect_timeout, **config.options)

    async def connect(self) -> None:
        """Open the database file and enable foreign keys."""
        if self._conn is not None:
            return
        try:
            import aiosqlite
        except ImportError:
            raise ConfigError(
                "aiosqlite is required for SQLite. Install with: pip install aiosqlite"
            ) from None

        path = self._config.path or ":memory:"
        uri = path.startswith("file:") or "?" in path

        try:
            self._conn = await aiosqlite.connect(
                path,
                timeout=self._config.connect_timeout,
                uri=uri,
            )
            self._conn.row_factory = aiosqlite.Row
            await self._conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            self._conn = None
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e
        self._mark_connected(path=path)

    async def disconnect(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            self._mark_disconnected()

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        self._require_connection()
        async with self._conn.execute(sql, tuple(params)) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        self._require_connection()
        cursor = await self._conn.execute(sql, tuple(params))
        try:
            await self._conn.commit()
            return ExecuteResult(
                rows_affected=max(cursor.rowcount, 0),
                last_insert_id=cursor.lastrowid,
            )
        finally:
            await cursor.close()


__all__ = [
    "SQLiteAdapter",
]
