"""Model registry.

Append-only mapping from record type to ``ModelDescriptor``, populated by
explicit ``register()`` calls (usable as a class decorator).  The migrator
walks it in registration order; the session uses it to find descriptors
for record types that are not ``Model`` subclasses.

Usage:
    from modelspine.orm import Model, Serial, Text, register

    @register
    class Tag(Model):
        id = Serial(primary_key=True)
        label = Text(unique=True)
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, TypeVar

from modelspine.core.errors import SchemaError
from modelspine.orm.model import ModelDescriptor, describe

T = TypeVar("T")


class ModelRegistry:
    """Descriptors in registration order, keyed by record type and table."""

    def __init__(self) -> None:
        self._by_type: dict[type, ModelDescriptor] = {}
        self._by_table: dict[str, ModelDescriptor] = {}

    def register(self, model: T, descriptor: ModelDescriptor | None = None) -> T:
        """Register a ``Model`` subclass, a descriptor, or a type plus descriptor.

        Registering the same type again is a no-op.  Returns ``model`` so the
        method doubles as a class decorator.

        Raises:
            SchemaError: If the model has no descriptor, or a different type
                already claims the table name.
        """
        descriptor = descriptor or describe(model)
        if descriptor is None:
            raise SchemaError(f"{model!r} has no model descriptor to register")

        record_type = descriptor.record_type
        if record_type in self._by_type:
            return model

        existing = self._by_table.get(descriptor.table_name)
        if existing is not None and existing.record_type is not record_type:
            raise SchemaError(
                f"Table '{descriptor.table_name}' is already registered to "
                f"{existing.record_type.__name__}"
            ).with_context(table=descriptor.table_name)

        self._by_type[record_type] = descriptor
        self._by_table[descriptor.table_name] = descriptor
        return model

    def describe(self, model: Any) -> ModelDescriptor:
        """Descriptor for a descriptor, model class, record instance or registered type.

        Raises:
            SchemaError: If nothing is known about ``model``.
        """
        descriptor = describe(model)
        if descriptor is not None:
            return descriptor
        record_type = model if isinstance(model, type) else type(model)
        try:
            return self._by_type[record_type]
        except KeyError:
            raise SchemaError(f"{record_type.__name__} is not a registered model") from None

    def is_record(self, value: Any) -> bool:
        """True for an instance of a model class or of a registered type."""
        if isinstance(value, (type, ModelDescriptor)):
            return False
        return describe(value) is not None or type(value) in self._by_type

    def get(self, table_name: str) -> ModelDescriptor | None:
        return self._by_table.get(table_name)

    def tables(self) -> list[str]:
        return list(self._by_table)

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(list(self._by_type.values()))

    def __len__(self) -> int:
        return len(self._by_type)

    def __contains__(self, model: Any) -> bool:
        if isinstance(model, str):
            return model in self._by_table
        descriptor = describe(model)
        record_type = descriptor.record_type if descriptor else model
        return record_type in self._by_type


# Global registry
registry = ModelRegistry()


def register(model: T, descriptor: ModelDescriptor | None = None) -> T:
    """Register with the process-wide registry."""
    return registry.register(model, descriptor)


__all__ = [
    "ModelRegistry",
    "registry",
    "register",
]
