"""Cache – window geometry: how UI pages map onto cached windows."""
from __future__ import annotations

import dataclasses
import math


@dataclasses.dataclass(frozen=True)
class WindowGeometry:
    """Page/window arithmetic for one page size.

    Windows are 1-based, never overlap, and hold ``pages_per_window`` whole
    pages. A ``window_size`` that is not a multiple of ``per_page`` is
    rounded down to one that is (never below a single page).
    """

    window_size: int
    per_page: int

    def __post_init__(self) -> None:
        if self.per_page < 1:
            raise ValueError("per_page must be >= 1")
        if self.window_size < 1:
            raise ValueError("window_size must be >= 1")

    @property
    def pages_per_window(self) -> int:
        return max(1, self.window_size // self.per_page)

    @property
    def rows_per_window(self) -> int:
        return self.pages_per_window * self.per_page

    def window_index(self, page: int) -> int:
        return (page - 1) // self.pages_per_window + 1

    def window_start_page(self, index: int) -> int:
        return (index - 1) * self.pages_per_window + 1

    def page_offset(self, page: int) -> int:
        """Row offset of *page* inside its window."""
        return ((page - 1) % self.pages_per_window) * self.per_page

    def position_fraction(self, page: int) -> float:
        """How far into its window *page* sits; the last page is ``1.0``."""
        return ((page - 1) % self.pages_per_window + 1) / self.pages_per_window

    def window_count(self, total_records: int) -> int:
        if total_records <= 0:
            return 0
        return math.ceil(total_records / self.rows_per_window)


__all__ = ["WindowGeometry"]
