"""Model-metadata-driven query layer: fields, models, predicates, SQL, session."""

from modelspine.orm.fields import NO_DEFAULT, NOW, FieldDescriptor, FieldKind, ForeignKey
from modelspine.orm.join import JoinedRecord, JoinType
from modelspine.orm.kwargs import And, Condition, F, Or, Predicate, kwargs
from modelspine.orm.model import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    Model,
    ModelDescriptor,
    Serial,
    Text,
)
from modelspine.orm.registry import ModelRegistry, register, registry
from modelspine.orm.session import Session
from modelspine.orm.sql import Operation, RenderedQuery, render

__all__ = [
    # Fields
    "FieldKind",
    "FieldDescriptor",
    "ForeignKey",
    "NOW",
    "NO_DEFAULT",
    # Models
    "Model",
    "ModelDescriptor",
    "Column",
    "Integer",
    "Serial",
    "Float",
    "Text",
    "Boolean",
    "Date",
    "DateTime",
    # Registry
    "ModelRegistry",
    "registry",
    "register",
    # Predicates
    "Predicate",
    "Condition",
    "And",
    "Or",
    "F",
    "kwargs",
    # SQL
    "Operation",
    "RenderedQuery",
    "render",
    # Execution
    "Session",
    "JoinType",
    "JoinedRecord",
]
