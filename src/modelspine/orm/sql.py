"""
SQL renderer: model metadata + predicate + dialect → parameterised SQL.

``render()`` is the single place where statements are built.  It binds
predicate field names to the model(s) in scope, coerces every value
through its field, and asks the dialect for each backend-specific
fragment.  Values never appear in SQL text; they travel in
``RenderedQuery.params`` in placeholder order.

Manifesto:
    - **Parameterised always:** Every caller value is a placeholder
    - **Quoted always:** Every identifier goes through ``dialect.quote``
    - **Fully parenthesised:** Predicate precedence is explicit in the text
    - **Fail before I/O:** Unknown columns, bad values and statements the
      dialect cannot express raise before anything reaches the database

Architecture:
    ::

        render(dialect, operation, model, predicate, values, ...)
              │
              ├── _Scope ──────── binds "age" / "user.age" to a field
              ├── _ParamCollector  placeholder(i) + params, same order
              └── Operation
                    CREATE_TABLE       CREATE TABLE IF NOT EXISTS ...
                    SELECT / COUNT     SELECT cols FROM t [WHERE] [LIMIT]
                    INSERT             INSERT INTO t (...) VALUES (...) [RETURNING]
                    UPDATE / DELETE    ... WHERE <predicate>   (required)
                    INNER_JOIN_SELECT  SELECT a.c AS "a.c" ... JOIN ... ON ...
                    ADD_COLUMN         ALTER TABLE t ADD COLUMN ...

Examples:
    >>> from modelspine.core.dialect import get_dialect
    >>> q = render(get_dialect("postgresql"), Operation.SELECT, User,
    ...            kwargs(name="Jane", age__lt=30))
    >>> q.sql
    'SELECT "id", "name", "age", "role" FROM "user" WHERE (("name" = $1) AND ("age" < $2))'
    >>> q.params
    ['Jane', 30]

Guardrails:
    ❌ DON'T: Build SQL strings outside this module
    ✅ DO: Add an ``Operation`` and render it here

Tags:
    sql, renderer, query-builder, dialect, orm, modelspine
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from modelspine.core.dialect import Dialect
from modelspine.core.errors import (
    InvalidFieldError,
    TypeMismatchError,
    UnsupportedOperationError,
)
from modelspine.orm.fields import FieldDescriptor
from modelspine.orm.join import JoinType, qualified
from modelspine.orm.kwargs import And, Condition, F, Or, Predicate
from modelspine.orm.model import ModelDescriptor, describe


class Operation(str, Enum):
    CREATE_TABLE = "create_table"
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    INNER_JOIN_SELECT = "join_select"
    COUNT = "count"
    ADD_COLUMN = "add_column"


@dataclass(frozen=True)
class RenderedQuery:
    """SQL text plus positional parameters in placeholder order."""

    sql: str
    params: list[Any] = field(default_factory=list)


class _ParamCollector:
    """Hands out placeholders in the same order it collects values."""

    def __init__(self, dialect: Dialect):
        self._dialect = dialect
        self.params: list[Any] = []

    def add(self, value: Any) -> str:
        placeholder = self._dialect.placeholder(len(self.params))
        self.params.append(value)
        return placeholder


class _Scope:
    """Models a predicate may reference, and how to spell their columns."""

    def __init__(self, dialect: Dialect, *models: ModelDescriptor):
        self.dialect = dialect
        self.models = models
        self.qualify = len(models) > 1

    def resolve(self, name: str) -> tuple[ModelDescriptor, FieldDescriptor]:
        qualifier, _, column = name.rpartition(".")
        if qualifier:
            for model in self.models:
                if model.matches(qualifier):
                    return model, model.field(column)
            raise InvalidFieldError(
                f"Unknown table qualifier '{qualifier}' in '{name}'", field=name
            )
        owners = [model for model in self.models if model.has_field(column)]
        if not owners:
            tables = ", ".join(m.table_name for m in self.models)
            raise InvalidFieldError(f"No column '{column}' on {tables}", field=name)
        if len(owners) > 1:
            raise InvalidFieldError(
                f"Column '{column}' is ambiguous; qualify it with a table name", field=name
            )
        return owners[0], owners[0].field(column)

    def column(self, model: ModelDescriptor, fd: FieldDescriptor) -> str:
        quoted = self.dialect.quote(fd.name)
        if self.qualify:
            return f"{self.dialect.quote(model.table_name)}.{quoted}"
        return quoted


def _lower_predicate(predicate: Predicate, scope: _Scope, params: _ParamCollector) -> str:
    if isinstance(predicate, And):
        left = _lower_predicate(predicate.left, scope, params)
        right = _lower_predicate(predicate.right, scope, params)
        return f"({left} AND {right})"
    if isinstance(predicate, Or):
        left = _lower_predicate(predicate.left, scope, params)
        right = _lower_predicate(predicate.right, scope, params)
        return f"({left} OR {right})"
    if isinstance(predicate, Condition):
        model, fd = scope.resolve(predicate.field)
        lhs = scope.column(model, fd)
        value = predicate.value
        if isinstance(value, F):
            other_model, other_fd = scope.resolve(value.name)
            return f"({lhs} {predicate.op} {scope.column(other_model, other_fd)})"
        if value is None:
            if predicate.op == "=":
                return f"({lhs} IS NULL)"
            if predicate.op == "!=":
                return f"({lhs} IS NOT NULL)"
            raise TypeMismatchError(
                f"NULL cannot be compared with '{predicate.op}'", field=predicate.field
            )
        encoded = fd.to_db(value, scope.dialect, allow_none=False)
        return f"({lhs} {predicate.op} {params.add(encoded)})"
    raise TypeError(f"Not a predicate node: {predicate!r}")


def render_predicate(
    dialect: Dialect,
    predicate: Predicate,
    *models: ModelDescriptor,
    params: _ParamCollector | None = None,
) -> RenderedQuery:
    """Render a predicate on its own (no leading ``WHERE``)."""
    params = params or _ParamCollector(dialect)
    sql = _lower_predicate(predicate, _Scope(dialect, *models), params)
    return RenderedQuery(sql, params.params)


# =============================================================================
# DDL
# =============================================================================


def column_definition(dialect: Dialect, fd: FieldDescriptor, *, inline_reference: bool = False) -> str:
    """``<col> <type> [NOT NULL] [UNIQUE] [DEFAULT <literal>]``."""
    name = dialect.quote(fd.name)
    if fd.is_generated:
        return f"{name} {dialect.auto_increment()}"

    parts = [name, dialect.column_type(fd.kind.value, fd.size)]
    if fd.primary_key:
        parts.append("PRIMARY KEY")
    else:
        if not fd.nullable:
            parts.append("NOT NULL")
        if fd.unique:
            parts.append("UNIQUE")
    # NOW is filled in per insert; DDL only carries literal defaults
    if fd.has_literal_default:
        parts.append(f"DEFAULT {dialect.literal(fd.to_db(fd.default, dialect))}")
    if inline_reference and fd.foreign_key is not None:
        fk = fd.foreign_key
        parts.append(f"REFERENCES {dialect.quote(fk.table)} ({dialect.quote(fk.column)})")
    return " ".join(parts)


def _create_table(dialect: Dialect, model: ModelDescriptor) -> RenderedQuery:
    definitions = [column_definition(dialect, fd) for fd in model.fields]
    for fd, fk in model.foreign_keys:
        definitions.append(
            f"FOREIGN KEY ({dialect.quote(fd.name)}) "
            f"REFERENCES {dialect.quote(fk.table)} ({dialect.quote(fk.column)})"
        )
    body = ", ".join(definitions)
    return RenderedQuery(f"CREATE TABLE IF NOT EXISTS {dialect.quote(model.table_name)} ({body})")


def _add_column(dialect: Dialect, model: ModelDescriptor, field_name: str | None) -> RenderedQuery:
    if not field_name:
        raise InvalidFieldError("ADD COLUMN needs a field name")
    fd = model.field(field_name)
    if dialect.restricted_add_column:
        if fd.primary_key or fd.unique:
            raise UnsupportedOperationError(
                f"{dialect.name} cannot add a PRIMARY KEY or UNIQUE column "
                f"('{model.table_name}.{fd.name}')",
                dialect=dialect.name,
            ).with_context(table=model.table_name, operation="add_column")
        if not fd.nullable and not fd.has_literal_default:
            raise UnsupportedOperationError(
                f"{dialect.name} cannot add NOT NULL column '{model.table_name}.{fd.name}' "
                "without a literal default",
                dialect=dialect.name,
            ).with_context(table=model.table_name, operation="add_column")
    definition = column_definition(dialect, fd, inline_reference=True)
    return RenderedQuery(
        f"ALTER TABLE {dialect.quote(model.table_name)} ADD COLUMN {definition}"
    )


# =============================================================================
# DML
# =============================================================================


def _select_list(dialect: Dialect, model: ModelDescriptor) -> str:
    return ", ".join(dialect.quote(name) for name in model.column_names)


def _where(
    dialect: Dialect,
    predicate: Predicate | None,
    params: _ParamCollector,
    *models: ModelDescriptor,
) -> str:
    if predicate is None:
        return ""
    return " WHERE " + _lower_predicate(predicate, _Scope(dialect, *models), params)


def _limit(limit: int | None) -> str:
    if limit is None:
        return ""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise TypeMismatchError(f"LIMIT must be a non-negative integer, got {limit!r}", value=limit)
    return f" LIMIT {limit}"


def _select(
    dialect: Dialect,
    model: ModelDescriptor,
    predicate: Predicate | None,
    limit: int | None,
) -> RenderedQuery:
    params = _ParamCollector(dialect)
    where = _where(dialect, predicate, params, model)
    sql = (
        f"SELECT {_select_list(dialect, model)} FROM {dialect.quote(model.table_name)}"
        f"{where}{_limit(limit)}"
    )
    return RenderedQuery(sql, params.params)


def _count(dialect: Dialect, model: ModelDescriptor, predicate: Predicate | None) -> RenderedQuery:
    params = _ParamCollector(dialect)
    where = _where(dialect, predicate, params, model)
    sql = f"SELECT COUNT(*) AS {dialect.quote('count')} FROM {dialect.quote(model.table_name)}{where}"
    return RenderedQuery(sql, params.params)


def _encode_values(
    dialect: Dialect, model: ModelDescriptor, values: Mapping[str, Any]
) -> list[tuple[FieldDescriptor, Any]]:
    for name in values:
        model.field(name)
    return [
        (fd, fd.to_db(values[fd.name], dialect))
        for fd in model.fields
        if fd.name in values
    ]


def _insert(dialect: Dialect, model: ModelDescriptor, values: Mapping[str, Any]) -> RenderedQuery:
    params = _ParamCollector(dialect)
    table = dialect.quote(model.table_name)
    encoded = _encode_values(dialect, model, values)
    if encoded:
        columns = ", ".join(dialect.quote(fd.name) for fd, _ in encoded)
        placeholders = ", ".join(params.add(value) for _, value in encoded)
        sql = f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"
    else:
        sql = f"INSERT INTO {table} {dialect.empty_insert()}"
    if dialect.supports_returning:
        sql += f" RETURNING {dialect.quote(model.primary_key.name)}"
    return RenderedQuery(sql, params.params)


def _update(
    dialect: Dialect,
    model: ModelDescriptor,
    predicate: Predicate | None,
    values: Mapping[str, Any] | None,
) -> RenderedQuery:
    if not values:
        raise UnsupportedOperationError(
            f"UPDATE on '{model.table_name}' needs at least one column to set",
            dialect=dialect.name,
        ).with_context(table=model.table_name, operation="update")
    if predicate is None:
        raise UnsupportedOperationError(
            f"UPDATE on '{model.table_name}' without a predicate is refused",
            dialect=dialect.name,
        ).with_context(table=model.table_name, operation="update")
    params = _ParamCollector(dialect)
    assignments = ", ".join(
        f"{dialect.quote(fd.name)} = {params.add(value)}"
        for fd, value in _encode_values(dialect, model, values)
    )
    where = _where(dialect, predicate, params, model)
    return RenderedQuery(
        f"UPDATE {dialect.quote(model.table_name)} SET {assignments}{where}", params.params
    )


def _delete(dialect: Dialect, model: ModelDescriptor, predicate: Predicate | None) -> RenderedQuery:
    if predicate is None:
        raise UnsupportedOperationError(
            f"DELETE on '{model.table_name}' without a predicate is refused",
            dialect=dialect.name,
        ).with_context(table=model.table_name, operation="delete")
    params = _ParamCollector(dialect)
    where = _where(dialect, predicate, params, model)
    return RenderedQuery(f"DELETE FROM {dialect.quote(model.table_name)}{where}", params.params)


def _join_select(
    dialect: Dialect,
    left: ModelDescriptor,
    right: ModelDescriptor | None,
    on: Predicate | None,
    where: Predicate | None,
    join_type: JoinType,
) -> RenderedQuery:
    if right is None:
        raise InvalidFieldError("A join needs a right-hand model")
    if on is None:
        raise InvalidFieldError("A join needs an ON predicate")
    join_type = JoinType(join_type)
    if join_type is JoinType.FULL and not dialect.supports_full_join:
        raise UnsupportedOperationError(
            f"{dialect.name} does not support FULL OUTER JOIN", dialect=dialect.name
        ).with_context(table=left.table_name, operation="join")

    columns = ", ".join(
        f"{dialect.quote(model.table_name)}.{dialect.quote(name)} "
        f"AS {dialect.quote(qualified(model, name))}"
        for model in (left, right)
        for name in model.column_names
    )
    params = _ParamCollector(dialect)
    condition = _lower_predicate(on, _Scope(dialect, left, right), params)
    sql = (
        f"SELECT {columns} FROM {dialect.quote(left.table_name)} "
        f"{join_type.sql} {dialect.quote(right.table_name)} ON {condition}"
        f"{_where(dialect, where, params, left, right)}"
    )
    return RenderedQuery(sql, params.params)


# =============================================================================
# ENTRY POINT
# =============================================================================


def _descriptor(model: Any) -> ModelDescriptor:
    descriptor = describe(model)
    if descriptor is None:
        raise InvalidFieldError(f"{model!r} is not a model")
    return descriptor


def render(
    dialect: Dialect,
    operation: Operation,
    model: Any,
    predicate: Predicate | None = None,
    values: Mapping[str, Any] | None = None,
    *,
    right: Any = None,
    where: Predicate | None = None,
    join_type: JoinType = JoinType.INNER,
    limit: int | None = None,
    field_name: str | None = None,
) -> RenderedQuery:
    """Render one statement for ``dialect``.

    Args:
        dialect: Target dialect strategy.
        operation: Statement kind.
        model: ``ModelDescriptor`` or ``Model`` subclass (the left model of a join).
        predicate: WHERE predicate, or the ON predicate of a join.
        values: Column values for INSERT / UPDATE SET.
        right: Right-hand model of a join.
        where: WHERE predicate of a join.
        join_type: INNER, LEFT, RIGHT or FULL.
        limit: Optional row limit for SELECT.
        field_name: Column to add for ADD_COLUMN.

    Raises:
        InvalidFieldError: Unknown column, qualifier, or ambiguous name.
        TypeMismatchError: A value cannot be stored in its field.
        UnsupportedOperationError: The dialect cannot express the request.
    """
    descriptor = _descriptor(model)
    match Operation(operation):
        case Operation.CREATE_TABLE:
            return _create_table(dialect, descriptor)
        case Operation.SELECT:
            return _select(dialect, descriptor, predicate, limit)
        case Operation.COUNT:
            return _count(dialect, descriptor, predicate)
        case Operation.INSERT:
            return _insert(dialect, descriptor, values or {})
        case Operation.UPDATE:
            return _update(dialect, descriptor, predicate, values)
        case Operation.DELETE:
            return _delete(dialect, descriptor, predicate)
        case Operation.INNER_JOIN_SELECT:
            right_descriptor = _descriptor(right) if right is not None else None
            return _join_select(dialect, descriptor, right_descriptor, predicate, where, join_type)
        case Operation.ADD_COLUMN:
            return _add_column(dialect, descriptor, field_name)


__all__ = [
    "Operation",
    "RenderedQuery",
    "render",
    "render_predicate",
    "column_definition",
]
