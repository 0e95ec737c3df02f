"""Database adapters -- one async interface for four backends.

Manifesto:
    The same model metadata must run on SQLite (dev), PostgreSQL and MySQL
    (production) and Turso (edge).  Each adapter is **import-guarded**: its
    driver is only required at ``connect()`` time, not at import time.

Architecture::

    DatabaseAdapter (base.py)        Abstract async base: connect/fetch_all/execute
        |-- SQLiteAdapter            aiosqlite
        |-- PostgreSQLAdapter        asyncpg pool
        |-- MySQLAdapter             mysql.connector.aio
        |-- TursoAdapter             httpx (libSQL HTTP pipeline)

    AdapterRegistry (registry.py)    Singleton: DatabaseType -> adapter class
    DatabaseConfig (types.py)        Connection parameters + URL parsing
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ ``await adapter.execute("SELECT * FROM t WHERE id=" + user_input)``
    ✅ ``await adapter.execute("SELECT * FROM t WHERE id=?", [user_input])``
    ❌ Importing optional drivers at module scope
    ✅ Import-guarded at ``connect()`` time with clear ``ConfigError``

Tags:
    modelspine, database, adapters, multi-backend, import-guarded,
    registry-pattern, sqlite, postgresql, mysql, turso
"""

from modelspine.core.dialect import Dialect, get_dialect

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .registry import AdapterRegistry, adapter_from_url, adapter_registry, get_adapter
from .sqlite import SQLiteAdapter
from .turso import TursoAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    # Types
    "DatabaseType",
    "DatabaseConfig",
    # Abstractions
    "Dialect",
    "get_dialect",
    "DatabaseAdapter",
    # Implementations
    "SQLiteAdapter",
    "PostgreSQLAdapter",
    "MySQLAdapter",
    "TursoAdapter",
    # Registry
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "adapter_from_url",
]
