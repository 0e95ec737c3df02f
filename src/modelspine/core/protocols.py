"""
Canonical protocol definitions for modelspine.

The session and the migrator talk to the database only through
``AsyncExecutor``.  Every adapter in :mod:`modelspine.core.adapters`
satisfies it, and so can any test double with the same shape.

Architecture:
    ::

        AsyncExecutor Protocol:
        ┌────────────────────────────────────────────────────────────┐
        │ dialect                 → Dialect strategy for rendering    │
        │ fetch_all(sql, params)  → list[dict] (column label → value) │
        │ execute(sql, params)    → ExecuteResult                     │
        └────────────────────────────────────────────────────────────┘

        Implementations:
        ┌────────────────────────────────────────────────────────────┐
        │ SQLiteAdapter      → aiosqlite                              │
        │ PostgreSQLAdapter  → asyncpg pool                           │
        │ MySQLAdapter       → mysql.connector.aio                    │
        │ TursoAdapter       → httpx (libSQL HTTP pipeline)           │
        └────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Let driver row types escape an adapter
    ✅ DO: Return plain ``dict`` rows keyed by column label

Tags:
    protocol, connection, async, database, modelspine, contracts
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from modelspine.core.dialect import Dialect


@dataclass(frozen=True)
class ExecuteResult:
    """Outcome of a non-row-returning statement."""

    rows_affected: int = 0
    last_insert_id: int | None = None


@runtime_checkable
class AsyncExecutor(Protocol):
    """
    Minimal ASYNC connection interface used by the engine.

    Each call is one round trip and commits on its own; there is no
    transaction spanning calls.
    """

    @property
    def dialect(self) -> Dialect:
        """Dialect the SQL handed to this executor is rendered for."""
        ...

    async def fetch_all(
        self, sql: str, params: Sequence[Any] = ()
    ) -> list[dict[str, Any]]:
        """Run a row-returning statement."""
        ...

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        """Run a statement and report affected rows and the generated key."""
        ...


__all__ = [
    "AsyncExecutor",
    "ExecuteResult",
]
