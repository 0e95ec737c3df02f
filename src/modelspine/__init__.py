"""modelspine -- async, model-driven ORM for SQLite, PostgreSQL, MySQL and Turso.

Describe each record type once; the description drives table creation,
CRUD and joins on every supported backend::

    from modelspine import Database, Model, Serial, Text, Integer, kwargs, register

    @register
    class User(Model, table="user"):
        id = Serial(primary_key=True)
        name = Text(unique=True)
        age = Integer()
        role = Text(default="user")

    async with await Database.connect("sqlite://:memory:") as db:
        (await db.migrate()).unwrap()
        await db.session.create(User, name="Jane", age=28)
        jane = (await db.session.get(User, kwargs(name="Jane"))).unwrap()
"""

from modelspine.core.errors import (
    ConfigError,
    ConnectionError,
    InvalidFieldError,
    MigrationError,
    ModelSpineError,
    NotFoundError,
    SchemaError,
    TypeMismatchError,
    UnresolvedForeignKeyError,
    UnsupportedOperationError,
)
from modelspine.core.logging import configure_logging, get_logger
from modelspine.core.result import Err, Ok, Result
from modelspine.core.settings import ModelSpineSettings
from modelspine.database import Database
from modelspine.orm import (
    NOW,
    Boolean,
    Date,
    DateTime,
    F,
    FieldDescriptor,
    FieldKind,
    Float,
    ForeignKey,
    Integer,
    JoinedRecord,
    JoinType,
    Model,
    ModelDescriptor,
    ModelRegistry,
    Serial,
    Session,
    Text,
    kwargs,
    register,
    registry,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Facade
    "Database",
    "Session",
    "ModelSpineSettings",
    "configure_logging",
    "get_logger",
    # Models
    "Model",
    "ModelDescriptor",
    "FieldDescriptor",
    "FieldKind",
    "ForeignKey",
    "NOW",
    "Integer",
    "Serial",
    "Float",
    "Text",
    "Boolean",
    "Date",
    "DateTime",
    "ModelRegistry",
    "registry",
    "register",
    # Predicates and joins
    "kwargs",
    "F",
    "JoinType",
    "JoinedRecord",
    # Results and errors
    "Result",
    "Ok",
    "Err",
    "ModelSpineError",
    "ConfigError",
    "ConnectionError",
    "InvalidFieldError",
    "MigrationError",
    "NotFoundError",
    "SchemaError",
    "TypeMismatchError",
    "UnresolvedForeignKeyError",
    "UnsupportedOperationError",
]
