"""Export – ExportRequest and ExportColumn."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

__all__ = ["ExportColumn", "ExportRequest"]


@dataclass(frozen=True)
class ExportColumn:
    """Defines a single column in an export."""

    key: str     # field read from each row
    header: str  # column header text


@dataclass
class ExportRequest:
    """Rows and columns to write into one CSV file."""

    columns: list[ExportColumn]
    rows: Iterable[Any]
    filename: str = "export.csv"
