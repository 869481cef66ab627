"""Query – FilterSpec, SortSpec, SortDirection."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any

from mp_datatable.query.operators import FilterOperator

GLOBAL_FIELD = "global"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, raw: object) -> "SortDirection":
        """Exactly ``"asc"`` is ascending; anything else sorts descending."""
        if raw is cls.ASC or raw == "asc":
            return cls.ASC
        return cls.DESC


def is_empty_value(value: Any) -> bool:
    """``None``, ``""`` and empty collections carry no filter."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


@dataclasses.dataclass(frozen=True)
class FilterSpec:
    """One column filter as set by the UI."""
    field: str
    operator: FilterOperator = FilterOperator.CONTAINS
    value: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", FilterOperator.parse(self.operator))

    @property
    def is_global(self) -> bool:
        return self.field == GLOBAL_FIELD

    @property
    def is_empty(self) -> bool:
        return is_empty_value(self.value)

    def with_value(self, value: Any) -> "FilterSpec":
        return dataclasses.replace(self, value=value)


@dataclasses.dataclass(frozen=True)
class SortSpec:
    """Single sort criterion; list position decides precedence."""
    field: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", SortDirection.parse(self.direction))

    @property
    def token(self) -> str:
        return f"{self.field}:{self.direction.value}"


__all__ = ["GLOBAL_FIELD", "FilterSpec", "SortDirection", "SortSpec", "is_empty_value"]
