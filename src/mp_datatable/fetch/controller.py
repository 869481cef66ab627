"""Fetch – FetchController: single-flight fetches routed into table state.

A fetch is one of three kinds:

* ``FULL`` – the whole dataset, stored in ``state.all_rows``;
* ``WINDOW`` – one window of ``window_size`` rows, stored in the window cache;
* ``PAGE`` – a single UI page, stored in ``state.page_rows``.

At most one fetch runs at a time; a call made while another is in flight
returns :attr:`FetchOutcome.SKIPPED` without touching the network. Every
invalidation bumps a generation counter and responses that belong to an
older generation are discarded. Once closed, every fetch returns
:attr:`FetchOutcome.CLOSED`.
"""
from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

from mp_datatable.cache import WindowCache, WindowGeometry
from mp_datatable.config.settings import TableSettings
from mp_datatable.fetch.client import TableHttpClient
from mp_datatable.fetch.response import extract_payload
from mp_datatable.fetch.retry import RetryPolicy
from mp_datatable.kernel.errors import FetchError
from mp_datatable.notifications import Notice, Notifier, Severity
from mp_datatable.observability.logging import get_logger
from mp_datatable.query import encode_query, translate_query
from mp_datatable.state import TableState

T = TypeVar("T")


class FetchKind(str, Enum):
    PAGE = "page"
    WINDOW = "window"
    FULL = "full"


class FetchOutcome(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    STALE = "stale"
    FAILED = "failed"
    CLOSED = "closed"


class FetchController(Generic[T]):
    """Issues requests for one table and writes the results into its state."""

    def __init__(
        self,
        endpoint: str,
        state: TableState[T],
        cache: WindowCache[T],
        client: TableHttpClient,
        settings: TableSettings,
        *,
        retry: RetryPolicy | None = None,
        notifier: Notifier,
        initial_params: dict[str, Any] | None = None,
        on_settled: Callable[[], None] | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._state = state
        self._cache = cache
        self._client = client
        self._settings = settings
        self._retry = retry or RetryPolicy(
            max_attempts=settings.max_retries,
            base_delay=settings.retry_base_delay,
        )
        self._notifier = notifier
        self._initial_params = dict(initial_params or {})
        self._on_settled = on_settled
        self._in_flight = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._generation = 0
        self._closed = False
        self._log = get_logger(__name__, endpoint=endpoint)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def geometry(self) -> WindowGeometry:
        return WindowGeometry(self._settings.window_size, self._state.per_page)

    def invalidate(self) -> None:
        """Mark any in-flight response as stale."""
        self._generation += 1

    def close(self) -> None:
        """Refuse further fetches and discard the one in flight, if any."""
        self._closed = True
        self.invalidate()

    async def wait_idle(self) -> None:
        await self._idle.wait()

    def build_params(self, page: int, kind: FetchKind, geometry: WindowGeometry | None = None) -> dict[str, Any]:
        geometry = geometry or self.geometry
        query = translate_query(self._state.filters, self._state.sorts).to_params()
        params: dict[str, Any]
        if kind is FetchKind.FULL:
            params = {"page": 1, "per_page": self._settings.full_load_size, **query, "full_load": True}
        elif kind is FetchKind.WINDOW:
            params = {"page": geometry.window_index(page), "per_page": geometry.rows_per_window, **query}
        else:
            params = {"page": page, "per_page": self._state.per_page, **query}
        params.update(self._initial_params)
        return params

    async def fetch(self, page: int, kind: FetchKind = FetchKind.PAGE) -> FetchOutcome:
        if self._closed:
            self._log.debug("fetch.refused_closed", page=page, kind=kind.value)
            return FetchOutcome.CLOSED
        if self._in_flight:
            self._log.debug("fetch.skipped", page=page, kind=kind.value)
            return FetchOutcome.SKIPPED

        self._in_flight = True
        self._idle.clear()
        state = self._state
        state.fetching = True
        state.loading = True
        state.error = None
        generation = self._generation

        try:
            geometry = self.geometry
            query = encode_query(self.build_params(page, kind, geometry))
            body = await self._retry.execute(
                lambda: self._client.get_json(self._endpoint, params=query),
                on_retry=self._on_retry,
            )
            rows, total = extract_payload(body, self._settings.data_property)
        except FetchError as exc:
            if generation != self._generation:
                self._log.info("fetch.stale_discarded", page=page, kind=kind.value, failed=True)
                state.error = None
                return FetchOutcome.STALE
            self._fail(exc, page, kind)
            return FetchOutcome.FAILED
        else:
            state.error = None
            if generation != self._generation:
                self._log.info("fetch.stale_discarded", page=page, kind=kind.value)
                return FetchOutcome.STALE
            self._apply(kind, page, geometry, rows, total)
            return FetchOutcome.APPLIED
        finally:
            state.loading = False
            state.fetching = False
            self._in_flight = False
            self._idle.set()
            if self._on_settled is not None:
                self._on_settled()

    def _apply(self, kind: FetchKind, page: int, geometry: WindowGeometry, rows: list[T], total: int) -> None:
        state = self._state
        if kind is FetchKind.FULL:
            state.all_rows = rows
            state.total_records = total or len(rows)
        elif kind is FetchKind.WINDOW:
            index = geometry.window_index(page)
            self._cache.set(index, rows)
            state.total_records = total or state.total_records
        else:
            state.page_rows = rows
            state.total_records = total or 0
        self._log.debug(
            "fetch.applied",
            page=page,
            kind=kind.value,
            rows=len(rows),
            total=state.total_records,
        )

    def _on_retry(self, attempt: int, max_attempts: int, exc: BaseException, delay: float) -> None:
        self._state.error = f"Retrying... ({attempt}/{max_attempts})"
        self._log.warning("fetch.retrying", attempt=attempt, max_attempts=max_attempts, delay=delay, exc=repr(exc))

    def _fail(self, exc: FetchError, page: int, kind: FetchKind) -> None:
        message = exc.message or "Network error"
        self._state.error = message
        self._log.error("fetch.failed", page=page, kind=kind.value, **exc.to_dict())
        self._notifier.notify(
            Notice(
                severity=Severity.ERROR,
                summary="Failed to load data",
                detail=message,
                life_ms=self._settings.error_notice_life_ms,
            )
        )


__all__ = ["FetchController", "FetchKind", "FetchOutcome"]
