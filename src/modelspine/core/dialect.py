"""SQL dialect abstraction for the model-driven query engine.

Provides a ``Dialect`` protocol and one concrete implementation per
supported backend.  The renderer in :mod:`modelspine.orm.sql` asks the
active dialect for every backend-specific fragment (placeholders,
identifier quoting, column types, boolean literals, the existence probe)
so that no module outside this one knows how SQLite and MySQL differ.

Manifesto:
    One model descriptor must produce valid SQL for SQLite, PostgreSQL,
    MySQL and Turso.  Without a dialect layer those differences leak into
    every statement builder.

    - **One interface:** Dialect protocol for all SQL fragments
    - **Zero coupling:** Dialects never import database drivers
    - **Strategy objects:** Stateless, pre-instantiated, looked up by name
    - **Testable:** Render for any dialect without a live database

Architecture::

    ┌──────────────────────────────────────────────────────────────────┐
    │                     Dialect Abstraction Layer                     │
    └──────────────────────────────────────────────────────────────────┘

    Renderer:
    ┌────────────────────────────────────────────────────────────────┐
    │  f"SELECT {d.quote('id')} FROM {d.quote(t)} WHERE ... "        │
    │  f"{d.quote('age')} < {d.placeholder(0)}"                      │
    └────────────────────────────────────────────────────────────────┘
                              │
                              ▼
    ┌──────────┐ ┌──────────────┐ ┌──────────┐ ┌──────────────┐
    │ SQLite   │ │ PostgreSQL   │ │  MySQL   │ │  Turso       │
    │ ?, ?     │ │ $1, $2       │ │ %s, %s   │ │ :p1, :p2     │
    │ "ident"  │ │ "ident"      │ │ `ident`  │ │ "ident"      │
    │ bool=1/0 │ │ TRUE/FALSE   │ │TRUE/FALSE│ │ bool=1/0     │
    └──────────┘ └──────────────┘ └──────────┘ └──────────────┘

Examples:
    >>> from modelspine.core.dialect import get_dialect
    >>> d = get_dialect("postgresql")
    >>> d.placeholders(3)
    '$1, $2, $3'
    >>> d.quote("user")
    '"user"'
    >>> get_dialect("mysql").column_type("text", None)
    'VARCHAR(255)'

Guardrails:
    ❌ DON'T: Interpolate values into SQL text
    ✅ DO: Emit placeholders and pass values as parameters

    ❌ DON'T: Branch on ``dialect.name`` in the renderer
    ✅ DO: Add a capability method here and ask for it

Tags:
    dialect, sql, abstraction, portability, database, modelspine,
    multi-backend, strategy
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from modelspine.core.errors import ConfigError

# Storage widths for the temporal kinds; values are stored as ISO text.
DATE_WIDTH = 10
DATETIME_WIDTH = 40
DEFAULT_VARCHAR = 255


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a SQL fragment (string) or a capability flag for
    the target database.  ``kind`` arguments are field-kind values such as
    ``"integer"`` or ``"datetime"``.
    """

    @property
    def name(self) -> str:
        """Dialect name (e.g. ``'sqlite'``)."""
        ...

    # -- Placeholders ------------------------------------------------------

    def placeholder(self, index: int) -> str:
        """Single placeholder for the ``index``-th parameter (0-based)."""
        ...

    def placeholders(self, count: int, start: int = 0) -> str:
        """Comma-separated placeholder list."""
        ...

    # -- Identifiers and literals ------------------------------------------

    def quote(self, identifier: str) -> str:
        """Quote a table or column identifier."""
        ...

    def literal(self, value: Any) -> str:
        """Render a constant for use in DDL ``DEFAULT`` clauses."""
        ...

    def boolean_true(self) -> str:
        ...

    def boolean_false(self) -> str:
        ...

    def encode_bool(self, value: bool) -> Any:
        """Parameter value the driver should receive for a boolean."""
        ...

    # -- DDL ---------------------------------------------------------------

    def column_type(self, kind: str, size: int | None) -> str:
        """Column type for a field kind."""
        ...

    def auto_increment(self) -> str:
        """Full column type of a generated integer primary key."""
        ...

    def empty_insert(self) -> str:
        """Tail of an INSERT that supplies no columns."""
        ...

    def table_exists_query(self) -> str:
        """Probe query taking one parameter (the table name).

        Returns at least one row when the table exists.
        """
        ...

    # -- Capabilities ------------------------------------------------------

    @property
    def supports_returning(self) -> bool:
        """``INSERT ... RETURNING`` is available."""
        ...

    @property
    def supports_full_join(self) -> bool:
        ...

    @property
    def restricted_add_column(self) -> bool:
        """``ALTER TABLE ADD COLUMN`` rejects PRIMARY KEY, UNIQUE and
        NOT NULL without a default."""
        ...


def _quote_with(identifier: str, mark: str) -> str:
    escaped = identifier.replace(mark, mark * 2)
    return f"{mark}{escaped}{mark}"


def _render_literal(value: Any, true: str, false: str) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return true if value else false
    if isinstance(value, (int, float)):
        return repr(value)
    text = str(value).replace("'", "''")
    return f"'{text}'"


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, booleans stored as ``1``/``0``."""

    @property
    def name(self) -> str:
        return "sqlite"

    # -- Placeholders ------------------------------------------------------

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int, start: int = 0) -> str:
        return ", ".join(self.placeholder(start + i) for i in range(count))

    # -- Identifiers and literals ------------------------------------------

    def quote(self, identifier: str) -> str:
        return _quote_with(identifier, '"')

    def literal(self, value: Any) -> str:
        return _render_literal(value, self.boolean_true(), self.boolean_false())

    def boolean_true(self) -> str:
        return "1"

    def boolean_false(self) -> str:
        return "0"

    def encode_bool(self, value: bool) -> Any:
        return 1 if value else 0

    # -- DDL ---------------------------------------------------------------

    def column_type(self, kind: str, size: int | None) -> str:
        match kind:
            case "integer" | "serial" | "boolean":
                return "INTEGER"
            case "float":
                return "REAL"
            case "text":
                return f"VARCHAR({size})" if size else "TEXT"
            case "date":
                return f"VARCHAR({DATE_WIDTH})"
            case "datetime":
                return f"VARCHAR({DATETIME_WIDTH})"
            case _:
                raise ConfigError(f"No {self.name} column type for kind: {kind}")

    def auto_increment(self) -> str:
        return "INTEGER PRIMARY KEY AUTOINCREMENT"

    def empty_insert(self) -> str:
        return "DEFAULT VALUES"

    def table_exists_query(self) -> str:
        return (
            "SELECT name FROM sqlite_master WHERE type = 'table' "
            f"AND name = {self.placeholder(0)}"
        )

    # -- Capabilities ------------------------------------------------------

    @property
    def supports_returning(self) -> bool:
        return False

    @property
    def supports_full_join(self) -> bool:
        return True

    @property
    def restricted_add_column(self) -> bool:
        return True


class TursoDialect(SQLiteDialect):
    """Turso (libSQL over HTTP): SQLite SQL with named ``:pN`` parameters."""

    @property
    def name(self) -> str:
        return "turso"

    def placeholder(self, index: int) -> str:
        return f":p{index + 1}"


class PostgreSQLDialect:
    """PostgreSQL dialect: ``$n`` placeholders, native booleans, RETURNING."""

    @property
    def name(self) -> str:
        return "postgresql"

    def placeholder(self, index: int) -> str:
        return f"${index + 1}"

    def placeholders(self, count: int, start: int = 0) -> str:
        return ", ".join(self.placeholder(start + i) for i in range(count))

    def quote(self, identifier: str) -> str:
        return _quote_with(identifier, '"')

    def literal(self, value: Any) -> str:
        return _render_literal(value, self.boolean_true(), self.boolean_false())

    def boolean_true(self) -> str:
        return "TRUE"

    def boolean_false(self) -> str:
        return "FALSE"

    def encode_bool(self, value: bool) -> Any:
        return bool(value)

    def column_type(self, kind: str, size: int | None) -> str:
        match kind:
            case "integer" | "serial":
                return "INTEGER"
            case "float":
                return "DOUBLE PRECISION"
            case "text":
                return f"VARCHAR({size})" if size else "TEXT"
            case "boolean":
                return "BOOLEAN"
            case "date":
                return f"VARCHAR({DATE_WIDTH})"
            case "datetime":
                return f"VARCHAR({DATETIME_WIDTH})"
            case _:
                raise ConfigError(f"No {self.name} column type for kind: {kind}")

    def auto_increment(self) -> str:
        return "SERIAL PRIMARY KEY"

    def empty_insert(self) -> str:
        return "DEFAULT VALUES"

    def table_exists_query(self) -> str:
        return (
            "SELECT table_name FROM information_schema.tables "
            f"WHERE table_schema = current_schema() AND table_name = {self.placeholder(0)}"
        )

    @property
    def supports_returning(self) -> bool:
        return True

    @property
    def supports_full_join(self) -> bool:
        return True

    @property
    def restricted_add_column(self) -> bool:
        return False


class MySQLDialect:
    """MySQL / MariaDB dialect: ``%s`` placeholders, backtick identifiers."""

    @property
    def name(self) -> str:
        return "mysql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int, start: int = 0) -> str:
        return ", ".join(self.placeholder(start + i) for i in range(count))

    def quote(self, identifier: str) -> str:
        return _quote_with(identifier, "`")

    def literal(self, value: Any) -> str:
        return _render_literal(value, self.boolean_true(), self.boolean_false())

    def boolean_true(self) -> str:
        return "TRUE"

    def boolean_false(self) -> str:
        return "FALSE"

    def encode_bool(self, value: bool) -> Any:
        return bool(value)

    def column_type(self, kind: str, size: int | None) -> str:
        # TEXT columns cannot carry a DEFAULT or a plain UNIQUE index in MySQL
        match kind:
            case "integer" | "serial":
                return "INTEGER"
            case "float":
                return "DOUBLE"
            case "text":
                return f"VARCHAR({size or DEFAULT_VARCHAR})"
            case "boolean":
                return "BOOLEAN"
            case "date":
                return f"VARCHAR({DATE_WIDTH})"
            case "datetime":
                return f"VARCHAR({DATETIME_WIDTH})"
            case _:
                raise ConfigError(f"No {self.name} column type for kind: {kind}")

    def auto_increment(self) -> str:
        return "INTEGER PRIMARY KEY AUTO_INCREMENT"

    def empty_insert(self) -> str:
        return "() VALUES ()"

    def table_exists_query(self) -> str:
        return (
            "SELECT table_name FROM information_schema.tables "
            f"WHERE table_schema = DATABASE() AND table_name = {self.placeholder(0)}"
        )

    @property
    def supports_returning(self) -> bool:
        return False

    @property
    def supports_full_join(self) -> bool:
        return False

    @property
    def restricted_add_column(self) -> bool:
        return False


# =========================================================================
# Registry
# =========================================================================

_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
    "mysql": MySQLDialect(),
    "turso": TursoDialect(),
    "libsql": TursoDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Args:
        db_type: One of ``'sqlite'``, ``'postgresql'``, ``'postgres'``,
                 ``'mysql'``, ``'turso'``, ``'libsql'`` (or a
                 ``DatabaseType`` member).

    Raises:
        ConfigError: If ``db_type`` is not recognised.

    Example:
        >>> get_dialect("turso").placeholders(2)
        ':p1, :p2'
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ConfigError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres', 'libsql'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (lower-cased key)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "TursoDialect",
    "PostgreSQLDialect",
    "MySQLDialect",
    "get_dialect",
    "register_dialect",
    "DATE_WIDTH",
    "DATETIME_WIDTH",
    "DEFAULT_VARCHAR",
]
