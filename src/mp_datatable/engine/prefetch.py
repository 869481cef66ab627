"""Engine – PrefetchScheduler: fetch the next window before the user gets there."""
from __future__ import annotations

from typing import Generic, TypeVar

from mp_datatable.cache import WindowCache
from mp_datatable.config.settings import TableSettings
from mp_datatable.engine.scheduling import Spawn, Throttler
from mp_datatable.fetch import FetchController, FetchKind
from mp_datatable.fetch.retry import Sleep
from mp_datatable.kernel.time import Clock
from mp_datatable.observability.logging import get_logger
from mp_datatable.state import TableState

T = TypeVar("T")

__all__ = ["PrefetchScheduler"]


class PrefetchScheduler(Generic[T]):
    """Throttled trigger for a background ``WINDOW`` fetch.

    A page whose position inside its window reaches ``prefetch_threshold``
    schedules the next window, unless it is already cached or lies past the
    last window. Nothing is prefetched outside hybrid mode.
    """

    def __init__(
        self,
        fetcher: FetchController[T],
        state: TableState[T],
        cache: WindowCache[T],
        settings: TableSettings,
        *,
        spawn: Spawn,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._state = state
        self._cache = cache
        self._threshold = settings.prefetch_threshold
        self._spawn = spawn
        self._throttle = Throttler(
            self._check,
            settings.prefetch_interval,
            clock=clock,
            sleep=sleep,
            spawn=spawn,
        )
        self._log = get_logger(__name__)

    def maybe_prefetch(self, page: int) -> None:
        self._throttle(page)

    def next_window_for(self, page: int) -> int | None:
        """Index of the window to prefetch for *page*, or ``None``."""
        geometry = self._fetcher.geometry
        if geometry.position_fraction(page) < self._threshold:
            return None
        index = geometry.window_index(page) + 1
        if index > geometry.window_count(self._state.total_records):
            return None
        if self._cache.has(index):
            return None
        return index

    def cancel(self) -> None:
        self._throttle.reset()

    def _check(self, page: int) -> None:
        if not self._state.is_server_side:
            return
        index = self.next_window_for(page)
        if index is None:
            return
        start = self._fetcher.geometry.window_start_page(index)
        self._log.debug("prefetch.scheduled", page=page, window=index, start_page=start)
        self._spawn(self._fetcher.fetch(start, FetchKind.WINDOW))
