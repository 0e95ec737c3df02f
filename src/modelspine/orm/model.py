"""
Model descriptors and the declarative ``Model`` base.

A ``ModelDescriptor`` is everything the engine knows about one record type:
its table, its ordered fields and its primary key, plus the two
conversions between records and storage rows.  Descriptors can be built by
hand for any record type whose constructor takes field names as keyword
arguments, or derived from a ``Model`` subclass:

Examples:
    >>> class User(Model, table="user"):
    ...     id = Serial(primary_key=True)
    ...     name = Text(unique=True)
    ...     age = Integer()
    ...     role = Text(default="user")
    >>> User.__descriptor__.column_names
    ('id', 'name', 'age', 'role')
    >>> User(name="Jane", age=28)
    User(id=None, name='Jane', age=28, role='user')
    >>> User.age < 30
    Condition(field='user.age', op='<', value=30)

Tags:
    orm, model, descriptor, declarative, modelspine
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from modelspine.core.errors import InvalidFieldError, SchemaError
from modelspine.orm.fields import NO_DEFAULT, FieldDescriptor, FieldKind, ForeignKey
from modelspine.orm.kwargs import F


@dataclass(frozen=True)
class ModelDescriptor:
    """Table name, ordered fields and record type of one model."""

    table_name: str
    fields: tuple[FieldDescriptor, ...]
    record_type: type

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        if not self.table_name or not isinstance(self.table_name, str):
            raise SchemaError(f"Invalid table name: {self.table_name!r}")
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise SchemaError(
                f"Duplicate field names on '{self.table_name}': {', '.join(duplicates)}"
            )
        keys = [f.name for f in self.fields if f.primary_key]
        if len(keys) != 1:
            raise SchemaError(
                f"Model '{self.table_name}' needs exactly one primary key, found {len(keys)}"
            )

    @property
    def primary_key(self) -> FieldDescriptor:
        return next(f for f in self.fields if f.primary_key)

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def writable_fields(self) -> tuple[FieldDescriptor, ...]:
        """Fields a caller supplies on insert (a generated key is excluded)."""
        return tuple(f for f in self.fields if not f.is_generated)

    @property
    def foreign_keys(self) -> tuple[tuple[FieldDescriptor, ForeignKey], ...]:
        return tuple((f, f.foreign_key) for f in self.fields if f.foreign_key is not None)

    def has_field(self, name: str) -> bool:
        return any(f.name == name for f in self.fields)

    def field(self, name: str) -> FieldDescriptor:
        for f in self.fields:
            if f.name == name:
                return f
        raise InvalidFieldError(
            f"No column '{name}' on '{self.table_name}'", field=name
        ).with_context(table=self.table_name)

    def to_values(self, record: Any) -> dict[str, Any]:
        """Read every field from a record, in descriptor order."""
        if isinstance(record, Mapping):
            return {f.name: record.get(f.name) for f in self.fields}
        return {f.name: getattr(record, f.name, None) for f in self.fields}

    def build(self, values: Mapping[str, Any]) -> Any:
        """Construct a record from already-decoded values."""
        return self.record_type(**{f.name: values.get(f.name) for f in self.fields})

    def from_row(self, row: Mapping[str, Any], prefix: str = "") -> Any:
        """Decode a storage row into a record; unknown columns are ignored."""
        values = {f.name: f.from_db(row.get(prefix + f.name)) for f in self.fields}
        return self.build(values)

    def matches(self, qualifier: str) -> bool:
        """``qualifier`` names this model (table name or record type name)."""
        return qualifier in (self.table_name, getattr(self.record_type, "__name__", None))


# =============================================================================
# DECLARATIVE COLUMNS
# =============================================================================


class Column:
    """Class-attribute column declaration for ``Model`` subclasses.

    On the class, the attribute reads as a qualified ``F`` reference; on an
    instance it reads as the stored value.
    """

    kind: ClassVar[FieldKind]

    def __init__(
        self,
        *,
        primary_key: bool = False,
        nullable: bool = False,
        unique: bool = False,
        auto_increment: bool = False,
        default: Any = NO_DEFAULT,
        foreign_key: Any = None,
        size: int | None = None,
    ):
        self.options = {
            "primary_key": primary_key,
            "nullable": nullable,
            "unique": unique,
            "auto_increment": auto_increment,
            "default": default,
            "foreign_key": foreign_key,
            "size": size,
        }
        self.name: str | None = None
        self.owner: type | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self.owner = owner

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            table = getattr(owner, "__table__", None)
            return F(f"{table}.{self.name}" if table else str(self.name))
        return instance.__dict__.get(self.name)

    def describe(self, name: str) -> FieldDescriptor:
        options = dict(self.options)
        if options["foreign_key"] is not None:
            options["foreign_key"] = ForeignKey.parse(options["foreign_key"])
        return FieldDescriptor(name, self.kind, **options)


class Integer(Column):
    kind = FieldKind.INTEGER


class Serial(Column):
    kind = FieldKind.SERIAL


class Float(Column):
    kind = FieldKind.FLOAT


class Text(Column):
    kind = FieldKind.TEXT


class Boolean(Column):
    kind = FieldKind.BOOLEAN


class Date(Column):
    kind = FieldKind.DATE


class DateTime(Column):
    kind = FieldKind.DATETIME


# =============================================================================
# MODEL BASE
# =============================================================================


class Model:
    """Declarative base: column attributes become a ``ModelDescriptor``.

    ``class Post(Model, table="posts")`` sets the table name; without it the
    lower-cased class name is used.  Subclasses without columns stay
    abstract and get no descriptor.
    """

    __table__: ClassVar[str]
    __descriptor__: ClassVar[ModelDescriptor]

    def __init_subclass__(cls, table: str | None = None, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        columns: dict[str, Column] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if isinstance(attr, Column):
                    columns[name] = attr
        if not columns:
            return
        cls.__table__ = table or cls.__dict__.get("__table__") or cls.__name__.lower()
        cls.__descriptor__ = ModelDescriptor(
            table_name=cls.__table__,
            fields=tuple(column.describe(name) for name, column in columns.items()),
            record_type=cls,
        )

    def __init__(self, **values: Any):
        descriptor = getattr(type(self), "__descriptor__", None)
        if descriptor is None:
            raise TypeError(f"{type(self).__name__} declares no columns")
        unknown = set(values) - set(descriptor.column_names)
        if unknown:
            raise TypeError(
                f"{type(self).__name__}() got unexpected fields: {', '.join(sorted(unknown))}"
            )
        for f in descriptor.fields:
            if f.name in values:
                value = values[f.name]
            else:
                value = f.resolve_default()
            self.__dict__[f.name] = value

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        descriptor = self.__descriptor__
        return descriptor.to_values(self) == descriptor.to_values(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        values = self.__descriptor__.to_values(self)
        body = ", ".join(f"{k}={v!r}" for k, v in values.items())
        return f"{type(self).__name__}({body})"


def describe(model: Any) -> ModelDescriptor | None:
    """Descriptor carried by a descriptor, ``Model`` subclass or instance."""
    if isinstance(model, ModelDescriptor):
        return model
    descriptor = getattr(model, "__descriptor__", None)
    return descriptor if isinstance(descriptor, ModelDescriptor) else None


__all__ = [
    "ModelDescriptor",
    "Model",
    "Column",
    "Integer",
    "Serial",
    "Float",
    "Text",
    "Boolean",
    "Date",
    "DateTime",
    "describe",
]
