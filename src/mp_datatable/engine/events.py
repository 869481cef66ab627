"""Engine – UI events consumed by the table controller."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from mp_datatable.query import SortSpec

__all__ = ["PageEvent", "SortEvent"]


@dataclass(frozen=True)
class PageEvent:
    """Paginator change; ``page`` is 0-based as reported by the UI."""

    page: int
    rows: int

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if self.rows < 1:
            raise ValueError("rows must be >= 1")


@dataclass(frozen=True)
class SortEvent:
    """Multi-column sort change.

    Entries are :class:`SortSpec` objects or mappings with ``field`` and
    ``order`` keys. ``None`` keeps the current sort list.
    """

    multi_sort_meta: Sequence[SortSpec | Mapping[str, Any]] | None = None

    def sort_specs(self) -> list[SortSpec] | None:
        if self.multi_sort_meta is None:
            return None
        return [
            meta if isinstance(meta, SortSpec) else SortSpec(meta["field"], meta.get("order"))
            for meta in self.multi_sort_meta
        ]
