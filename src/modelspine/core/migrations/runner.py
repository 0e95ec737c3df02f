"""Schema migrator.

Creates the table of every registered model that does not exist yet, in
foreign-key dependency order.  Migration is non-destructive: an existing
table is left untouched (and reported as skipped), nothing is ever
dropped, and columns are only added through the explicit
``add_column()`` helper.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from modelspine.core.errors import (
    ModelSpineError,
    MigrationError,
    UnresolvedForeignKeyError,
)
from modelspine.core.logging import get_logger
from modelspine.core.protocols import AsyncExecutor
from modelspine.core.result import Err, Ok, Result
from modelspine.orm.model import ModelDescriptor
from modelspine.orm.registry import ModelRegistry
from modelspine.orm.sql import Operation, render

logger = get_logger(__name__)


@dataclass
class MigrationResult:
    """Result of a migration run."""

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0


def dependency_order(descriptors: Iterable[ModelDescriptor]) -> list[ModelDescriptor]:
    """Registration order, stably moved so referenced tables come first.

    Self-references are allowed.

    Raises:
        UnresolvedForeignKeyError: A reference names an unknown table or
            column, or the references form a cycle.
    """
    models = list(descriptors)
    by_table = {d.table_name: d for d in models}

    for descriptor in models:
        for fd, fk in descriptor.foreign_keys:
            target = by_table.get(fk.table)
            if target is None:
                raise UnresolvedForeignKeyError(
                    f"'{descriptor.table_name}.{fd.name}' references unregistered table "
                    f"'{fk.table}'",
                    table=descriptor.table_name,
                )
            if not target.has_field(fk.column):
                raise UnresolvedForeignKeyError(
                    f"'{descriptor.table_name}.{fd.name}' references missing column '{fk}'",
                    table=descriptor.table_name,
                )

    ordered: list[ModelDescriptor] = []
    done: set[str] = set()
    visiting: list[str] = []

    def visit(descriptor: ModelDescriptor) -> None:
        table = descriptor.table_name
        if table in done:
            return
        if table in visiting:
            cycle = " -> ".join([*visiting[visiting.index(table):], table])
            raise UnresolvedForeignKeyError(
                f"Foreign-key cycle: {cycle}", table=table
            )
        visiting.append(table)
        for _, fk in descriptor.foreign_keys:
            if fk.table != table:
                visit(by_table[fk.table])
        visiting.pop()
        done.add(table)
        ordered.append(descriptor)

    for descriptor in models:
        visit(descriptor)
    return ordered


class Migrator:
    """Creates missing tables for registered models.

    Parameters
    ----------
    connection
        Any ``AsyncExecutor`` (usually a connected adapter).

    Example::

        migrator = Migrator(adapter)
        match await migrator.migrate(registry):
            case Ok(result):
                print(f"Created {len(result.applied)} tables")
            case Err(error):
                print(error.to_dict())
    """

    def __init__(self, connection: AsyncExecutor) -> None:
        self._conn = connection

    @property
    def dialect(self):
        return self._conn.dialect

    async def migrate(self, registry: ModelRegistry | Iterable[ModelDescriptor]) -> Result[MigrationResult]:
        """Create every missing table, dependencies first.

        Stops at the first failure with ``Err(MigrationError)``; tables
        created before it stay in place and are listed in ``applied``.
        """
        try:
            ordered = dependency_order(registry)
        except UnresolvedForeignKeyError as e:
            logger.error("migration.failed", table=e.table, error=e.message)
            return Err(e)

        result = MigrationResult()
        for descriptor in ordered:
            table = descriptor.table_name
            statement = None
            try:
                if await self.table_exists(table):
                    result.skipped.append(table)
                    logger.info("migration.skipped", table=table)
                    continue
                statement = render(self.dialect, Operation.CREATE_TABLE, descriptor).sql
                await self._conn.execute(statement)
            except Exception as e:
                return self._failed(result, table, statement, e)
            result.applied.append(table)
            logger.info("migration.applied", table=table)

        return Ok(result)

    async def table_exists(self, table: str) -> bool:
        rows = await self._conn.fetch_all(self.dialect.table_exists_query(), [table])
        return bool(rows)

    async def add_column(self, model: Any, field_name: str) -> Result[str]:
        """Add one column of ``model`` to its existing table.

        Returns the executed statement, or ``Err(UnsupportedOperationError)``
        when the dialect cannot add this column.
        """
        statement = None
        table = getattr(model, "table_name", None) or getattr(model, "__table__", None)
        try:
            statement = render(
                self.dialect, Operation.ADD_COLUMN, model, field_name=field_name
            ).sql
            await self._conn.execute(statement)
        except ModelSpineError as e:
            logger.warning("migration.failed", table=table, column=field_name, error=e.message)
            return Err(e)
        except Exception as e:
            return self._failed(MigrationResult(), table, statement, e)
        logger.info("migration.column_added", table=table, column=field_name)
        return Ok(statement)

    def _failed(
        self,
        result: MigrationResult,
        table: str | None,
        statement: str | None,
        error: Exception,
    ) -> Err[MigrationResult]:
        result.errors[str(table)] = str(error)
        logger.error(
            "migration.failed",
            table=table,
            statement=statement,
            applied=result.applied,
            error=str(error),
        )
        return Err(
            MigrationError(
                f"Migration stopped at '{table}': {error}",
                table=table,
                statement=statement,
                applied=result.applied,
                cause=error,
            ).with_context(dialect=self.dialect.name)
        )


__all__ = [
    "Migrator",
    "MigrationResult",
    "dependency_order",
]
