"""
Field descriptors: one column of one model.

A ``FieldDescriptor`` is immutable metadata: name, kind, constraints,
default and an optional foreign key.  It also owns the value rules for its
column, coercing caller values on the way in (``coerce`` / ``to_db``) and
decoding storage values on the way out (``from_db``).

Examples:
    >>> age = FieldDescriptor("age", FieldKind.INTEGER)
    >>> age.coerce(28.0)
    28
    >>> created = FieldDescriptor("created", FieldKind.DATETIME, default=NOW)
    >>> created.resolve_default()  # doctest: +SKIP
    datetime.datetime(2026, 10, 17, 9, 30)

Tags:
    orm, fields, schema, coercion, modelspine
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from modelspine.core.errors import SchemaError, TypeMismatchError

if TYPE_CHECKING:
    from modelspine.core.dialect import Dialect

DATE_FORMAT = "%Y-%m-%d"


class FieldKind(str, Enum):
    """Column value kinds understood by every dialect."""

    INTEGER = "integer"
    SERIAL = "serial"
    FLOAT = "float"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"


class _Sentinel:
    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __reduce__(self) -> str:
        return self._name


NOW = _Sentinel("NOW")
"""Default token: the current date or time, resolved when a value is needed."""

NO_DEFAULT = _Sentinel("NO_DEFAULT")


@dataclass(frozen=True)
class ForeignKey:
    """Reference to ``table.column``."""

    table: str
    column: str

    @classmethod
    def parse(cls, target: Any) -> ForeignKey:
        """Build from ``"table.column"``, ``(Model, "column")`` or ``Model.column``."""
        if isinstance(target, ForeignKey):
            return target
        if isinstance(target, tuple) and len(target) == 2:
            owner, column = target
            table = getattr(owner, "__table__", None) or getattr(owner, "table_name", owner)
            if not isinstance(table, str):
                raise SchemaError(f"Cannot resolve foreign-key table from {owner!r}")
            return cls(table, column)
        name = getattr(target, "name", target)
        if isinstance(name, str) and name.count(".") == 1:
            table, column = name.split(".")
            if table and column:
                return cls(table, column)
        raise SchemaError(f"Invalid foreign-key target: {target!r}", value=target)

    def __str__(self) -> str:
        return f"{self.table}.{self.column}"


@dataclass(frozen=True)
class FieldDescriptor:
    """Immutable metadata for one column.

    Invalid combinations raise ``SchemaError`` at construction.
    """

    name: str
    kind: FieldKind
    nullable: bool = False
    unique: bool = False
    primary_key: bool = False
    auto_increment: bool = False
    default: Any = NO_DEFAULT
    foreign_key: ForeignKey | None = None
    size: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, FieldKind):
            try:
                object.__setattr__(self, "kind", FieldKind(self.kind))
            except ValueError:
                raise SchemaError(
                    f"Unknown field kind {self.kind!r}", field=self.name
                ) from None
        if self.foreign_key is not None and not isinstance(self.foreign_key, ForeignKey):
            object.__setattr__(self, "foreign_key", ForeignKey.parse(self.foreign_key))
        self._validate()

    def _validate(self) -> None:
        if not self.name or not isinstance(self.name, str) or "." in self.name:
            raise SchemaError(f"Invalid field name: {self.name!r}", field=str(self.name))
        if self.kind is FieldKind.SERIAL and not self.primary_key:
            raise SchemaError("SERIAL fields must be the primary key", field=self.name)
        if self.auto_increment and not self.primary_key:
            raise SchemaError("auto_increment requires primary_key", field=self.name)
        if self.auto_increment and self.kind not in (FieldKind.INTEGER, FieldKind.SERIAL):
            raise SchemaError(
                f"auto_increment is not valid for {self.kind.value} fields", field=self.name
            )
        if self.primary_key and self.nullable:
            raise SchemaError("A primary key cannot be nullable", field=self.name)
        if self.size is not None:
            if self.kind is not FieldKind.TEXT:
                raise SchemaError("size is only valid for text fields", field=self.name)
            if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
                raise SchemaError("size must be a positive integer", field=self.name, value=self.size)

        if self.default is NOW:
            if self.kind not in (FieldKind.DATE, FieldKind.DATETIME):
                raise SchemaError("NOW is only valid for date and datetime fields", field=self.name)
        elif self.default is not NO_DEFAULT:
            if self.kind is FieldKind.BOOLEAN and not isinstance(self.default, bool):
                raise SchemaError(
                    "Boolean defaults must be bool", field=self.name, value=self.default
                )
            try:
                self.coerce(self.default)
            except TypeMismatchError as e:
                raise SchemaError(
                    f"Default does not fit a {self.kind.value} field",
                    field=self.name,
                    value=self.default,
                    cause=e,
                ) from e

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_generated(self) -> bool:
        """The database assigns this column's value on insert."""
        return self.primary_key and (self.kind is FieldKind.SERIAL or self.auto_increment)

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    @property
    def has_literal_default(self) -> bool:
        return self.default is not NO_DEFAULT and self.default is not NOW

    def resolve_default(self) -> Any:
        """Value for a missing column: the literal, the current time, or ``None``."""
        if self.default is NOW:
            now = datetime.now().replace(microsecond=0)
            return now.date() if self.kind is FieldKind.DATE else now
        if self.default is NO_DEFAULT:
            return None
        return self.coerce(self.default)

    def is_unset_key(self, value: Any) -> bool:
        """``None``, or ``0`` for a generated key, means "not inserted yet"."""
        if value is None:
            return True
        return self.is_generated and value == 0 and not isinstance(value, bool)

    # ------------------------------------------------------------------
    # Value conversion
    # ------------------------------------------------------------------

    def coerce(self, value: Any, *, allow_none: bool | None = None) -> Any:
        """Normalise a caller value to this field's Python type.

        Raises:
            TypeMismatchError: If the value cannot represent this kind.
        """
        if value is None:
            if self.nullable if allow_none is None else allow_none:
                return None
            raise self._mismatch(value, "is not nullable")

        match self.kind:
            case FieldKind.INTEGER | FieldKind.SERIAL:
                if isinstance(value, bool):
                    raise self._mismatch(value)
                if isinstance(value, int):
                    return value
                if isinstance(value, float) and value.is_integer():
                    return int(value)
            case FieldKind.FLOAT:
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    return float(value)
            case FieldKind.TEXT:
                if isinstance(value, str):
                    return value
            case FieldKind.BOOLEAN:
                if isinstance(value, bool):
                    return value
                if isinstance(value, int) and value in (0, 1):
                    return bool(value)
            case FieldKind.DATE:
                if isinstance(value, datetime):
                    return value.date()
                if isinstance(value, date):
                    return value
                if isinstance(value, str):
                    try:
                        return date.fromisoformat(value)
                    except ValueError:
                        pass
            case FieldKind.DATETIME:
                if isinstance(value, datetime):
                    return _normalise_offset(value)
                if isinstance(value, date):
                    return datetime.combine(value, time())
                if isinstance(value, str):
                    try:
                        return _normalise_offset(datetime.fromisoformat(value))
                    except ValueError:
                        pass
        raise self._mismatch(value)

    def to_db(self, value: Any, dialect: Dialect, *, allow_none: bool | None = None) -> Any:
        """Coerce, then encode for the driver (booleans, ISO text dates)."""
        value = self.coerce(value, allow_none=allow_none)
        if value is None:
            return None
        match self.kind:
            case FieldKind.BOOLEAN:
                return dialect.encode_bool(value)
            case FieldKind.DATE:
                return value.strftime(DATE_FORMAT)
            case FieldKind.DATETIME:
                return value.isoformat(sep=" ")
        return value

    def from_db(self, value: Any) -> Any:
        """Decode a storage value back into this field's Python type."""
        if value is None:
            return None
        match self.kind:
            case FieldKind.BOOLEAN:
                if isinstance(value, str):
                    return value.strip().lower() in ("1", "true", "t")
                return bool(value)
            case FieldKind.INTEGER | FieldKind.SERIAL:
                return int(value)
            case FieldKind.FLOAT:
                return float(value)
            case FieldKind.DATE:
                if isinstance(value, date):
                    return value if not isinstance(value, datetime) else value.date()
                return date.fromisoformat(str(value)[:10])
            case FieldKind.DATETIME:
                if isinstance(value, datetime):
                    return value
                return datetime.fromisoformat(str(value))
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8")
        return value

    def _mismatch(self, value: Any, reason: str | None = None) -> TypeMismatchError:
        detail = reason or f"cannot be stored as {self.kind.value}"
        return TypeMismatchError(f"Field '{self.name}' {detail}: {value!r}", field=self.name, value=value)



def _normalise_offset(value: datetime) -> datetime:
    # Aware values are kept in UTC so stored text compares by instant.
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


__all__ = [
    "FieldKind",
    "FieldDescriptor",
    "ForeignKey",
    "NOW",
    "NO_DEFAULT",
    "DATE_FORMAT",
]
