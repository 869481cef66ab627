"""Engine – ModeSelector: full-client or hybrid-server, decided from the total."""
from __future__ import annotations

from typing import Generic, TypeVar

from mp_datatable.cache import WindowCache
from mp_datatable.config.settings import TableSettings
from mp_datatable.fetch import FetchController, FetchKind, FetchOutcome
from mp_datatable.kernel.errors import InvalidTransitionError
from mp_datatable.observability.logging import get_logger
from mp_datatable.state import TablePhase, TableState

T = TypeVar("T")

__all__ = ["ModeSelector"]


class ModeSelector(Generic[T]):
    """Runs the classification load for a table.

    1. fetch page 1 to learn the total;
    2. ``total <= client_side_threshold`` → load everything once;
    3. otherwise → fetch the window holding the current page.

    A full load whose total exceeds the threshold (the dataset grew between
    the two requests) falls back to hybrid mode. Closing the table while a
    request is outstanding ends the load with :attr:`FetchOutcome.CLOSED`.
    """

    def __init__(
        self,
        fetcher: FetchController[T],
        state: TableState[T],
        cache: WindowCache[T],
        settings: TableSettings,
    ) -> None:
        self._fetcher = fetcher
        self._state = state
        self._cache = cache
        self._settings = settings
        self._log = get_logger(__name__)

    def classify(self, total: int) -> TablePhase:
        if total <= self._settings.client_side_threshold:
            return TablePhase.FULL_CLIENT
        return TablePhase.HYBRID_SERVER

    async def select(self) -> FetchOutcome:
        state = self._state
        if state.phase is TablePhase.CLOSED:
            raise InvalidTransitionError(state.phase.value, TablePhase.CLASSIFYING.value)
        await self._fetcher.wait_idle()
        if state.phase is TablePhase.CLOSED:
            return FetchOutcome.CLOSED
        state.transition(TablePhase.CLASSIFYING)

        outcome = await self._fetcher.fetch(1, FetchKind.PAGE)
        if state.phase is TablePhase.CLOSED:
            return FetchOutcome.CLOSED
        if outcome is not FetchOutcome.APPLIED:
            return outcome

        mode = self.classify(state.total_records)
        self._log.info(
            "mode.classified",
            mode=mode.value,
            total=state.total_records,
            threshold=self._settings.client_side_threshold,
        )

        if mode is TablePhase.FULL_CLIENT:
            outcome = await self._fetcher.fetch(1, FetchKind.FULL)
            if state.phase is TablePhase.CLOSED:
                return FetchOutcome.CLOSED
            if outcome is not FetchOutcome.APPLIED:
                return outcome
            if state.total_records <= self._settings.client_side_threshold:
                state.transition(TablePhase.FULL_CLIENT)
                return outcome
            self._log.warning(
                "mode.fallback_to_hybrid",
                total=state.total_records,
                threshold=self._settings.client_side_threshold,
            )

        state.all_rows = []
        state.transition(TablePhase.HYBRID_SERVER)
        page = state.current_page
        outcome = await self._fetcher.fetch(page, FetchKind.WINDOW)
        if state.phase is TablePhase.CLOSED:
            return FetchOutcome.CLOSED
        if outcome is FetchOutcome.APPLIED:
            state.page_rows = self._cache.page_rows(page, self._fetcher.geometry)
        return outcome
