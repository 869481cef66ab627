"""Cache – bounded cache of fetched windows, keyed by window index."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Generic, TypeVar

from mp_datatable.cache.eviction import EvictionPolicy, LRUEvictionPolicy
from mp_datatable.cache.geometry import WindowGeometry

T = TypeVar("T")


class WindowCache(Generic[T]):
    """At most ``max_windows`` windows resident; eviction per *policy*.

    Contents are positional, so callers clear the cache whenever ordering or
    membership of the underlying dataset may have changed.
    """

    def __init__(self, max_windows: int = 5, policy: EvictionPolicy | None = None) -> None:
        if max_windows < 1:
            raise ValueError("max_windows must be >= 1")
        self._max = max_windows
        self._policy = policy or LRUEvictionPolicy()
        self._windows: dict[int, list[T]] = {}

    @property
    def max_windows(self) -> int:
        return self._max

    def get(self, index: int) -> list[T] | None:
        rows = self._windows.get(index)
        if rows is not None:
            self._policy.on_access(index)
        return rows

    def set(self, index: int, rows: Sequence[T]) -> None:
        self._windows[index] = list(rows)
        self._policy.on_insert(index)
        while len(self._windows) > self._max:
            victim = self._policy.victim()
            self._windows.pop(victim, None)  # type: ignore[arg-type]
            self._policy.on_remove(victim)

    def has(self, index: int) -> bool:
        """Membership test that leaves recency untouched."""
        return index in self._windows

    def clear(self) -> None:
        self._windows.clear()
        self._policy.clear()

    def indexes(self) -> list[int]:
        """Resident window indexes, next eviction candidate first."""
        return [index for index in self._policy.order() if index in self._windows]  # type: ignore[misc]

    def page_rows(self, page: int, geometry: WindowGeometry) -> list[T]:
        """Rows of *page* sliced out of its resident window, ``[]`` on a miss."""
        window = self.get(geometry.window_index(page))
        if window is None:
            return []
        offset = geometry.page_offset(page)
        return window[offset : offset + geometry.per_page]

    def __len__(self) -> int:
        return len(self._windows)

    def __contains__(self, index: object) -> bool:
        return index in self._windows


__all__ = ["WindowCache"]
