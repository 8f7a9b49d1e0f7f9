"""
Record Query Model

Store-agnostic description of a record fetch: field selection, conditions,
condition groups, ordering and paging. ``SupabaseRecordStore`` translates it
into PostgREST calls; tests inspect it directly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Operator(str, Enum):
    """Condition operators understood by the record store."""
    EQUAL_TO = "EqualTo"
    CONTAINS = "Contains"  # case-insensitive substring
    EXACT_MATCH = "ExactMatch"  # match any of the values exactly
    GREATER_THAN_OR_EQUAL_TO = "GreaterThanOrEqualTo"
    LESS_THAN_OR_EQUAL_TO = "LessThanOrEqualTo"


class GroupOperator(str, Enum):
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class Condition:
    """Single predicate on one field."""
    field: str
    operator: Operator
    values: tuple[Any, ...]

    @classmethod
    def of(cls, field_name: str, operator: Operator, *values: Any) -> "Condition":
        return cls(field=field_name, operator=operator, values=tuple(values))


@dataclass(frozen=True)
class ConditionGroup:
    """Conditions combined with AND or OR."""
    conditions: tuple[Condition, ...]
    operator: GroupOperator = GroupOperator.OR


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass
class RecordQuery:
    """
    Full query against one table.

    ``where`` conditions and ``where_groups`` are ANDed together.
    ``limit=None`` leaves paging to the store's default.
    """
    fields: list[str] = field(default_factory=list)
    where: list[Condition] = field(default_factory=list)
    where_groups: list[ConditionGroup] = field(default_factory=list)
    order_by: list[OrderBy] = field(default_factory=list)
    limit: Optional[int] = None
    offset: int = 0

    def conditions_on(self, field_name: str) -> list[Condition]:
        """All top-level conditions touching ``field_name``."""
        return [c for c in self.where if c.field == field_name]
