"""
Query executor: CRUD verbs over rendered SQL.

``Session`` maps each verb onto one rendered statement and one round trip
through an ``AsyncExecutor``.  Every verb returns a ``Result``: engine
errors (bad fields, uncoercible values, statements the dialect refuses,
missing rows) come back as ``Err``, and so does any driver failure,
wrapped in ``ConnectionError`` with the original exception chained as
``cause``.  Cancellation is never caught.

Manifesto:
    - **One statement, one round trip:** No hidden follow-up queries
    - **Records are values:** Inputs are never mutated; results are new
    - **Errors are values:** Callers branch on ``Err``, nothing is retried

Architecture:
    ::

        session.create(User, name="Jane", age=28)
              │
              ├── registry.describe(User)         → ModelDescriptor
              ├── _insert_values()                → coerce + fill defaults
              ├── render(dialect, INSERT, ...)    → RenderedQuery
              ├── executor.execute / fetch_all    → ExecuteResult / rows
              └── descriptor.build(values + key)  → Ok(User(...))

Examples:
    >>> session = Session(adapter)
    >>> user = (await session.create(User, name="Jane", age=28)).unwrap()
    >>> (await session.get(User, kwargs(name="Jane"))).unwrap().role
    'user'
    >>> await session.set(User, user.id, age=29)
    Ok(1)
    >>> await session.filter(User, User.age < 30)
    Ok([User(id=1, name='Jane', age=29, role='user')])

Guardrails:
    ❌ DON'T: Rely on ``filter`` order; it is whatever storage returns
    ✅ DO: Sort in Python when order matters

    ❌ DON'T: Expect a bulk ``delete`` to roll back on a missing key
    ✅ DO: Inspect ``NotFoundError.key``; earlier rows stay deleted

Tags:
    orm, session, crud, query-executor, async, modelspine
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from modelspine.core.errors import (
    ConnectionError,
    ModelSpineError,
    NotFoundError,
    TypeMismatchError,
)
from modelspine.core.logging import get_logger
from modelspine.core.protocols import AsyncExecutor, ExecuteResult
from modelspine.core.result import Err, Ok, Result
from modelspine.orm.join import JoinedRecord, JoinType, map_joined_rows
from modelspine.orm.kwargs import Condition, Predicate
from modelspine.orm.model import ModelDescriptor
from modelspine.orm.registry import ModelRegistry
from modelspine.orm.registry import registry as default_registry
from modelspine.orm.sql import Operation, RenderedQuery, render

logger = get_logger(__name__)


class Session:
    """CRUD and join verbs bound to one executor."""

    def __init__(self, connection: AsyncExecutor, *, registry: ModelRegistry | None = None):
        self._connection = connection
        self._registry = registry if registry is not None else default_registry

    @property
    def dialect(self):
        return self._connection.dialect

    @property
    def registry(self) -> ModelRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, model: Any, **values: Any) -> Result[Any]:
        """Insert one row built from ``values`` and return the new record.

        Literal and ``NOW`` defaults are filled in; every other
        non-nullable, non-generated field must be given.
        """
        try:
            descriptor = self._registry.describe(model)
            return Ok(await self._insert(descriptor, values))
        except ModelSpineError as e:
            return Err(e)

    async def save(self, record: Any) -> Result[Any]:
        """Insert ``record`` if its key is unset, otherwise update it by key."""
        try:
            descriptor = self._registry.describe(record)
            values = descriptor.to_values(record)
            pk = descriptor.primary_key
            if pk.is_unset_key(values[pk.name]):
                values.pop(pk.name)
                return Ok(await self._insert(descriptor, values))
            return Ok(await self._update_record(descriptor, values))
        except ModelSpineError as e:
            return Err(e)

    async def update(self, record: Any) -> Result[Any]:
        """Write every field of ``record`` to the row with its key.

        Zero matched rows gives ``Err(NotFoundError)``.
        """
        try:
            descriptor = self._registry.describe(record)
            values = descriptor.to_values(record)
            pk = descriptor.primary_key
            if pk.is_unset_key(values[pk.name]):
                raise TypeMismatchError(
                    f"Cannot update a '{descriptor.table_name}' record without a primary key",
                    field=pk.name,
                )
            return Ok(await self._update_record(descriptor, values))
        except ModelSpineError as e:
            return Err(e)

    async def set(self, model: Any, pk_value: Any, **values: Any) -> Result[int]:
        """Partial update of the row whose primary key is ``pk_value``."""
        try:
            descriptor = self._registry.describe(model)
            pk = descriptor.primary_key
            query = render(
                self.dialect,
                Operation.UPDATE,
                descriptor,
                Condition(pk.name, "=", pk_value),
                values,
            )
            result = await self._execute(query, descriptor, Operation.UPDATE)
            if result.rows_affected == 0:
                raise self._not_found(descriptor, pk_value, "update")
            return Ok(result.rows_affected)
        except ModelSpineError as e:
            return Err(e)

    async def delete(self, records: Any) -> Result[int]:
        """Delete one record, or each record of a sequence in order.

        Stops at the first record whose key matches no row and returns
        ``Err(NotFoundError(key=...))``; rows deleted before it stay deleted.
        """
        if (
            self._registry.is_record(records)
            or isinstance(records, (str, bytes))
            or not isinstance(records, Sequence)
        ):
            batch = [records]
        else:
            batch = list(records)

        deleted = 0
        try:
            for record in batch:
                descriptor = self._registry.describe(record)
                pk = descriptor.primary_key
                key = descriptor.to_values(record)[pk.name]
                if key is None:
                    raise TypeMismatchError(
                        f"Cannot delete a '{descriptor.table_name}' record without a primary key",
                        field=pk.name,
                    )
                query = render(
                    self.dialect,
                    Operation.DELETE,
                    descriptor,
                    Condition(pk.name, "=", key),
                )
                result = await self._execute(query, descriptor, Operation.DELETE)
                if result.rows_affected == 0:
                    raise self._not_found(descriptor, key, "delete").with_context(
                        deleted=deleted
                    )
                deleted += result.rows_affected
        except ModelSpineError as e:
            return Err(e)
        return Ok(deleted)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, model: Any, predicate: Predicate | None = None) -> Result[Any]:
        """First matching record, or ``Ok(None)``."""
        try:
            descriptor = self._registry.describe(model)
            query = render(self.dialect, Operation.SELECT, descriptor, predicate, limit=1)
            rows = await self._fetch(query, descriptor, Operation.SELECT)
            return Ok(descriptor.from_row(rows[0]) if rows else None)
        except ModelSpineError as e:
            return Err(e)

    async def filter(self, model: Any, predicate: Predicate | None = None) -> Result[list[Any]]:
        """Every matching record, in no guaranteed order."""
        try:
            descriptor = self._registry.describe(model)
            query = render(self.dialect, Operation.SELECT, descriptor, predicate)
            rows = await self._fetch(query, descriptor, Operation.SELECT)
            return Ok([descriptor.from_row(row) for row in rows])
        except ModelSpineError as e:
            return Err(e)

    async def all(self, model: Any) -> Result[list[Any]]:
        return await self.filter(model)

    async def count(self, model: Any, predicate: Predicate | None = None) -> Result[int]:
        try:
            descriptor = self._registry.describe(model)
            query = render(self.dialect, Operation.COUNT, descriptor, predicate)
            rows = await self._fetch(query, descriptor, Operation.COUNT)
            return Ok(int(rows[0]["count"]) if rows else 0)
        except ModelSpineError as e:
            return Err(e)

    async def join(
        self,
        left: Any,
        right: Any,
        on: Predicate,
        *,
        where: Predicate | None = None,
        join_type: JoinType = JoinType.INNER,
    ) -> Result[list[JoinedRecord]]:
        """Join two models; one ``JoinedRecord`` per result row."""
        try:
            left_descriptor = self._registry.describe(left)
            right_descriptor = self._registry.describe(right)
            query = render(
                self.dialect,
                Operation.INNER_JOIN_SELECT,
                left_descriptor,
                on,
                right=right_descriptor,
                where=where,
                join_type=join_type,
            )
            rows = await self._fetch(query, left_descriptor, Operation.INNER_JOIN_SELECT)
            return Ok(map_joined_rows(left_descriptor, right_descriptor, rows))
        except ModelSpineError as e:
            return Err(e)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _insert_values(self, descriptor: ModelDescriptor, values: Mapping[str, Any]) -> dict[str, Any]:
        """Coerced values for every column that will be written."""
        for name in values:
            descriptor.field(name)

        prepared: dict[str, Any] = {}
        for fd in descriptor.fields:
            value = values.get(fd.name)
            if fd.is_generated and fd.is_unset_key(value):
                continue
            if value is None and fd.has_default and not (fd.nullable and fd.name in values):
                value = fd.resolve_default()
            if value is None and not fd.nullable:
                raise TypeMismatchError(
                    f"Missing value for required field '{descriptor.table_name}.{fd.name}'",
                    field=fd.name,
                ).with_context(table=descriptor.table_name, operation="insert")
            prepared[fd.name] = fd.coerce(value)
        return prepared

    async def _insert(self, descriptor: ModelDescriptor, values: Mapping[str, Any]) -> Any:
        prepared = self._insert_values(descriptor, values)
        query = render(self.dialect, Operation.INSERT, descriptor, values=prepared)
        pk = descriptor.primary_key

        if self.dialect.supports_returning:
            rows = await self._fetch(query, descriptor, Operation.INSERT)
            key = rows[0][pk.name] if rows else prepared.get(pk.name)
        else:
            result = await self._execute(query, descriptor, Operation.INSERT)
            key = prepared.get(pk.name, result.last_insert_id)
        if pk.name not in prepared:
            prepared[pk.name] = pk.from_db(key)
        return descriptor.build(prepared)

    async def _update_record(self, descriptor: ModelDescriptor, values: dict[str, Any]) -> Any:
        pk = descriptor.primary_key
        key = values[pk.name]
        changes = {name: value for name, value in values.items() if name != pk.name}
        coerced = {name: descriptor.field(name).coerce(value) for name, value in changes.items()}
        query = render(
            self.dialect,
            Operation.UPDATE,
            descriptor,
            Condition(pk.name, "=", key),
            coerced,
        )
        result = await self._execute(query, descriptor, Operation.UPDATE)
        if result.rows_affected == 0:
            raise self._not_found(descriptor, key, "update")
        return descriptor.build({**coerced, pk.name: pk.coerce(key)})

    def _not_found(self, descriptor: ModelDescriptor, key: Any, operation: str) -> NotFoundError:
        return NotFoundError(
            f"No '{descriptor.table_name}' row with "
            f"{descriptor.primary_key.name} = {key!r}",
            key=key,
        ).with_context(table=descriptor.table_name, operation=operation)

    async def _fetch(
        self, query: RenderedQuery, descriptor: ModelDescriptor, operation: Operation
    ) -> list[dict[str, Any]]:
        logger.debug(
            "sql.execute",
            dialect=self.dialect.name,
            statement=query.sql,
            params=len(query.params),
        )
        try:
            return await self._connection.fetch_all(query.sql, query.params)
        except ModelSpineError:
            raise
        except Exception as e:
            raise self._driver_error(e, query, descriptor, operation) from e

    async def _execute(
        self, query: RenderedQuery, descriptor: ModelDescriptor, operation: Operation
    ) -> ExecuteResult:
        logger.debug(
            "sql.execute",
            dialect=self.dialect.name,
            statement=query.sql,
            params=len(query.params),
        )
        try:
            return await self._connection.execute(query.sql, query.params)
        except ModelSpineError:
            raise
        except Exception as e:
            raise self._driver_error(e, query, descriptor, operation) from e

    def _driver_error(
        self,
        error: Exception,
        query: RenderedQuery,
        descriptor: ModelDescriptor,
        operation: Operation,
    ) -> ConnectionError:
        logger.warning(
            "sql.failed",
            dialect=self.dialect.name,
            table=descriptor.table_name,
            operation=operation.value,
            error=str(error),
        )
        wrapped = ConnectionError(f"{operation.value} on '{descriptor.table_name}' failed: {error}", cause=error)
        wrapped.with_context(
            table=descriptor.table_name,
            operation=operation.value,
            dialect=self.dialect.name,
            statement=query.sql,
        )
        return wrapped


__all__ = ["Session"]
