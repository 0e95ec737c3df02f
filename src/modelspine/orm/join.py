"""Join planning types and row mapping.

A join row carries every column of both models under its qualified name
(``"user.id"``, ``"profile.user_id"``), so columns with the same name on
both sides never collide.  ``JoinedRecord`` splits such a row back into
the two records.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from modelspine.orm.model import ModelDescriptor


class JoinType(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"

    @property
    def sql(self) -> str:
        return "INNER JOIN" if self is JoinType.INNER else f"{self.value} OUTER JOIN"


@dataclass(frozen=True)
class JoinedRecord:
    """One joined row: both records plus the qualified value mapping.

    ``left`` or ``right`` is ``None`` when an outer join found no match on
    that side.  Unpacks as ``user, profile = joined``.
    """

    left: Any
    right: Any
    values: Mapping[str, Any] = field(default_factory=dict)

    def __getitem__(self, qualified_name: str) -> Any:
        return self.values[qualified_name]

    def __iter__(self) -> Iterator[Any]:
        yield self.left
        yield self.right


def qualified(descriptor: ModelDescriptor, column: str) -> str:
    return f"{descriptor.table_name}.{column}"


def _side(descriptor: ModelDescriptor, row: Mapping[str, Any]) -> tuple[Any, dict[str, Any]]:
    prefix = f"{descriptor.table_name}."
    values = {
        prefix + f.name: f.from_db(row.get(prefix + f.name)) for f in descriptor.fields
    }
    # Primary keys are NOT NULL, so a NULL key means the outer join had no match
    if values[prefix + descriptor.primary_key.name] is None:
        return None, values
    return descriptor.from_row(row, prefix=prefix), values


def map_joined_rows(
    left: ModelDescriptor,
    right: ModelDescriptor,
    rows: list[Mapping[str, Any]],
) -> list[JoinedRecord]:
    """Split qualified join rows into ``JoinedRecord`` values."""
    records = []
    for row in rows:
        left_record, left_values = _side(left, row)
        right_record, right_values = _side(right, row)
        records.append(
            JoinedRecord(left_record, right_record, {**left_values, **right_values})
        )
    return records


__all__ = [
    "JoinType",
    "JoinedRecord",
    "map_joined_rows",
    "qualified",
]
