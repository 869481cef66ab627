"""State – the mutable state of one table instance and its lifecycle."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Generic, TypeVar

from mp_datatable.kernel.errors import InvalidTransitionError
from mp_datatable.query import FilterSpec, SortSpec

T = TypeVar("T")


class TablePhase(str, Enum):
    """Top-level lifecycle of a table.

    ``UNINITIALIZED → CLASSIFYING → FULL_CLIENT | HYBRID_SERVER``; a refresh
    re-enters ``CLASSIFYING``. ``CLOSED`` is terminal.
    """

    UNINITIALIZED = "uninitialized"
    CLASSIFYING = "classifying"
    FULL_CLIENT = "full_client"
    HYBRID_SERVER = "hybrid_server"
    CLOSED = "closed"


_TRANSITIONS: dict[TablePhase, frozenset[TablePhase]] = {
    TablePhase.UNINITIALIZED: frozenset({TablePhase.CLASSIFYING, TablePhase.CLOSED}),
    TablePhase.CLASSIFYING: frozenset(
        {TablePhase.CLASSIFYING, TablePhase.FULL_CLIENT, TablePhase.HYBRID_SERVER, TablePhase.CLOSED}
    ),
    TablePhase.FULL_CLIENT: frozenset({TablePhase.CLASSIFYING, TablePhase.CLOSED}),
    TablePhase.HYBRID_SERVER: frozenset({TablePhase.CLASSIFYING, TablePhase.CLOSED}),
    TablePhase.CLOSED: frozenset(),
}


@dataclasses.dataclass
class TableState(Generic[T]):
    """Everything the UI reads, mutated by the engine only.

    ``refreshing`` marks the transient reload after refresh/sort/filter; the
    phase it returns to is decided by whoever started the reload.
    """

    per_page: int
    phase: TablePhase = TablePhase.UNINITIALIZED
    refreshing: bool = False
    total_records: int = 0
    current_page: int = 1
    sorts: list[SortSpec] = dataclasses.field(default_factory=list)
    filters: dict[str, FilterSpec] = dataclasses.field(default_factory=dict)
    selected_rows: list[T] = dataclasses.field(default_factory=list)
    hidden_columns: list[str] = dataclasses.field(default_factory=list)
    loading: bool = False
    fetching: bool = False
    error: str | None = None
    page_rows: list[T] = dataclasses.field(default_factory=list)
    all_rows: list[T] = dataclasses.field(default_factory=list)

    def transition(self, target: TablePhase) -> None:
        if target not in _TRANSITIONS[self.phase]:
            raise InvalidTransitionError(self.phase.value, target.value)
        self.phase = target

    @property
    def is_client_side(self) -> bool:
        return self.phase is TablePhase.FULL_CLIENT

    @property
    def is_server_side(self) -> bool:
        return self.phase is TablePhase.HYBRID_SERVER

    def snapshot(self) -> dict[str, Any]:
        """Loggable summary without row payloads."""
        return {
            "phase": self.phase.value,
            "refreshing": self.refreshing,
            "total_records": self.total_records,
            "current_page": self.current_page,
            "per_page": self.per_page,
            "loading": self.loading,
            "error": self.error,
        }


__all__ = ["TablePhase", "TableState"]
