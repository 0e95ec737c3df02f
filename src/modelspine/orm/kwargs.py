"""
Predicate builder.

Predicates are small immutable trees: ``Condition`` leaves joined by
``And`` / ``Or`` nodes.  Nothing here knows about tables or dialects;
field names are bound to a model (or a join scope) when the tree is
rendered, so an unknown column surfaces as ``InvalidFieldError`` at that
point.

Manifesto:
    - **Immutable:** Combining two predicates never mutates either
    - **Late binding:** Names resolve against the model at render time
    - **No raw SQL:** Only the six comparison operators, ``AND`` and ``OR``

Examples:
    >>> kwargs(name="Jane", age__lt=30)
    And(left=Condition(field='name', op='=', value='Jane'), right=Condition(field='age', op='<', value=30))
    >>> (F("age") < 18) | (F("age") >= 65)
    Or(left=Condition(field='age', op='<', value=18), right=Condition(field='age', op='>=', value=65))

    Column-to-column comparisons, as used for join conditions:

    >>> F("user.id") == F("profile.user_id")
    Condition(field='user.id', op='=', value=F('profile.user_id'))

Tags:
    orm, predicate, query-builder, dsl, modelspine
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

OPERATORS = ("=", "!=", "<", "<=", ">", ">=")

_SUFFIXES = {
    "eq": "=",
    "ne": "!=",
    "lt": "<",
    "lte": "<=",
    "gt": ">",
    "gte": ">=",
}


class Predicate:
    """Base for predicate tree nodes."""

    __slots__ = ()

    def and_(self, other: Predicate) -> Predicate:
        return And(self, _ensure_predicate(other))

    def or_(self, other: Predicate) -> Predicate:
        return Or(self, _ensure_predicate(other))

    def __and__(self, other: Predicate) -> Predicate:
        return self.and_(other)

    def __or__(self, other: Predicate) -> Predicate:
        return self.or_(other)

    def fields(self) -> Iterator[str]:
        """Yield every column name the tree references."""
        raise NotImplementedError


@dataclass(frozen=True, eq=False)
class F:
    """Column reference: ``F("age")`` or qualified ``F("user.id")``."""

    name: str

    def _compare(self, op: str, other: Any) -> Condition:
        return Condition(self.name, op, other)

    def __eq__(self, other: Any) -> Condition:  # type: ignore[override]
        return self._compare("=", other)

    def __ne__(self, other: Any) -> Condition:  # type: ignore[override]
        return self._compare("!=", other)

    def __lt__(self, other: Any) -> Condition:
        return self._compare("<", other)

    def __le__(self, other: Any) -> Condition:
        return self._compare("<=", other)

    def __gt__(self, other: Any) -> Condition:
        return self._compare(">", other)

    def __ge__(self, other: Any) -> Condition:
        return self._compare(">=", other)

    def __hash__(self) -> int:
        return hash(("F", self.name))

    def same_as(self, other: Any) -> bool:
        return isinstance(other, F) and other.name == self.name

    def __repr__(self) -> str:
        return f"F({self.name!r})"


@dataclass(frozen=True, eq=False)
class Condition(Predicate):
    """Leaf: ``field <op> value``; ``value`` may be another column (``F``)."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator {self.op!r}; expected one of {OPERATORS}")
        if not isinstance(self.field, str) or not self.field:
            raise ValueError(f"Invalid field name: {self.field!r}")

    def fields(self) -> Iterator[str]:
        yield self.field
        if isinstance(self.value, F):
            yield self.value.name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Condition):
            return NotImplemented
        if isinstance(self.value, F) or isinstance(other.value, F):
            same_value = isinstance(self.value, F) and self.value.same_as(other.value)
        else:
            same_value = self.value == other.value
        return self.field == other.field and self.op == other.op and bool(same_value)

    def __hash__(self) -> int:
        value = ("F", self.value.name) if isinstance(self.value, F) else self.value
        return hash((self.field, self.op, value))


@dataclass(frozen=True)
class And(Predicate):
    left: Predicate
    right: Predicate

    def fields(self) -> Iterator[str]:
        yield from self.left.fields()
        yield from self.right.fields()


@dataclass(frozen=True)
class Or(Predicate):
    left: Predicate
    right: Predicate

    def fields(self) -> Iterator[str]:
        yield from self.left.fields()
        yield from self.right.fields()


def _ensure_predicate(value: Any) -> Predicate:
    if not isinstance(value, Predicate):
        raise TypeError(f"Expected a predicate, got {type(value).__name__}")
    return value


def kwargs(**conditions: Any) -> Predicate:
    """Build a predicate from keyword arguments, joined with AND.

    A ``__<op>`` suffix selects the operator (``eq``, ``ne``, ``lt``,
    ``lte``, ``gt``, ``gte``); without one the comparison is ``=``.

    Raises:
        ValueError: If called without any condition.
    """
    if not conditions:
        raise ValueError("kwargs() needs at least one condition")

    predicate: Predicate | None = None
    for key, value in conditions.items():
        name, op = key, "="
        base, sep, suffix = key.rpartition("__")
        if sep and suffix in _SUFFIXES and base:
            name, op = base, _SUFFIXES[suffix]
        leaf = Condition(name, op, value)
        predicate = leaf if predicate is None else And(predicate, leaf)
    return predicate


__all__ = [
    "Predicate",
    "Condition",
    "And",
    "Or",
    "F",
    "kwargs",
    "OPERATORS",
]
