"""Table errors — misuse of the table state machine and export failures."""

from __future__ import annotations

from typing import Any

from mp_datatable.kernel.errors.base import BaseError


class TableError(BaseError):
    """Application-level table failure."""

    default_code = "table_error"


class InvalidTransitionError(TableError):
    """A state transition not allowed by the table lifecycle was requested."""

    default_code = "invalid_transition"

    def __init__(self, source: str, target: str, **kwargs: Any) -> None:
        super().__init__(f"Cannot move table from {source} to {target}", **kwargs)
        self.source = source
        self.target = target


class ExportError(TableError):
    """Writing or downloading an export failed."""

    default_code = "export_error"


__all__ = ["ExportError", "InvalidTransitionError", "TableError"]
