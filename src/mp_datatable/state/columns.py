"""State – ColumnDefinition and row access helpers."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from mp_datatable.query import GLOBAL_FIELD, FilterOperator, FilterSpec

__all__ = ["ColumnDefinition", "cell_value", "initial_filters"]


@dataclass(frozen=True)
class ColumnDefinition:
    """One table column as declared by the consumer."""

    field: str
    header: str = ""
    sortable: bool = True
    filterable: bool = False
    match_mode: FilterOperator = FilterOperator.CONTAINS
    hidden: bool = False

    @property
    def label(self) -> str:
        return self.header or self.field


def initial_filters(columns: Iterable[ColumnDefinition]) -> dict[str, FilterSpec]:
    """Empty filter slots: the global search plus one per filterable column."""
    filters = {GLOBAL_FIELD: FilterSpec(GLOBAL_FIELD, FilterOperator.CONTAINS)}
    for column in columns:
        if column.filterable:
            filters[column.field] = FilterSpec(column.field, column.match_mode)
    return filters


def cell_value(row: Any, field: str, default: Any = None) -> Any:
    """Read *field* from a mapping row or an attribute-style row."""
    if isinstance(row, Mapping):
        return row.get(field, default)
    return getattr(row, field, default)
