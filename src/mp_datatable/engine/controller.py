"""Engine – TableController, the façade a UI binds a remote table to.

Typical use::

    async with TableController("/api/students", columns) as table:
        await table.load()
        await table.on_page(PageEvent(page=3, rows=20))
        rows = table.rows

Small datasets (``total <= client_side_threshold``) are loaded once and
paged, sorted and filtered by the UI without further requests. Larger ones
are served window by window from the endpoint.
"""
from __future__ import annotations

import asyncio
import json
from collections.abc import Coroutine, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Generic, TypeVar

from mp_datatable.cache import WindowCache
from mp_datatable.config.settings import TableSettings
from mp_datatable.engine.events import PageEvent, SortEvent
from mp_datatable.engine.mode_selector import ModeSelector
from mp_datatable.engine.prefetch import PrefetchScheduler
from mp_datatable.engine.scheduling import Debouncer
from mp_datatable.export import ExportColumn, ExportRequest, ExportService
from mp_datatable.fetch import FetchController, FetchKind, FetchOutcome, RetryPolicy, TableHttpClient
from mp_datatable.fetch.retry import Sleep
from mp_datatable.kernel.errors import ExportError, FetchError, ValidationError
from mp_datatable.kernel.time import Clock
from mp_datatable.notifications import LoggingNotifier, Notice, Notifier, Severity
from mp_datatable.observability.logging import get_logger
from mp_datatable.query import GLOBAL_FIELD, FilterOperator, FilterSpec, SortSpec, encode_query
from mp_datatable.state import ColumnDefinition, TablePhase, TableState, cell_value, initial_filters

T = TypeVar("T")

__all__ = ["TableController"]


class TableController(Generic[T]):
    """Remote table engine for one endpoint.

    Parameters
    ----------
    endpoint:
        URL of the paginated listing, relative to the client's ``base_url``.
    columns:
        Column definitions; filterable ones get an empty filter slot.
    settings:
        Engine tuning, :class:`TableSettings` defaults when omitted.
    client:
        Shared HTTP client. When omitted the controller creates one and
        closes it in :meth:`close`.
    notifier:
        Receives user-facing notices (:class:`LoggingNotifier` by default).
    initial_params:
        Static query parameters sent with every data and export request.
    bulk_actions:
        Allowed bulk action identifiers; empty means any action is allowed.
    cache:
        Window cache to use instead of an LRU cache of ``cache_max_windows``.
    clock, sleep:
        Time sources for throttling, debouncing and retry backoff.
    """

    def __init__(
        self,
        endpoint: str,
        columns: Sequence[ColumnDefinition] = (),
        *,
        settings: TableSettings | None = None,
        client: TableHttpClient | None = None,
        notifier: Notifier | None = None,
        initial_params: Mapping[str, Any] | None = None,
        bulk_actions: Iterable[str] = (),
        cache: WindowCache[T] | None = None,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._columns = list(columns)
        self._settings = settings or TableSettings()
        self._owns_client = client is None
        self._client = client or TableHttpClient(timeout=self._settings.request_timeout)
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._initial_params = dict(initial_params or {})
        self._bulk_actions = tuple(bulk_actions)
        self._cache: WindowCache[T] = cache or WindowCache(self._settings.cache_max_windows)
        self._state: TableState[T] = TableState(
            per_page=self._settings.page_size,
            filters=initial_filters(self._columns),
            hidden_columns=[column.field for column in self._columns if column.hidden],
        )
        self._tasks: set[asyncio.Task[Any]] = set()
        self._reload_pending = False
        self._log = get_logger(__name__, endpoint=endpoint)

        self._fetcher: FetchController[T] = FetchController(
            endpoint,
            self._state,
            self._cache,
            self._client,
            self._settings,
            retry=RetryPolicy(
                max_attempts=self._settings.max_retries,
                base_delay=self._settings.retry_base_delay,
                sleep=sleep,
            ),
            notifier=self._notifier,
            initial_params=self._initial_params,
            on_settled=self._on_fetch_settled,
        )
        self._selector: ModeSelector[T] = ModeSelector(self._fetcher, self._state, self._cache, self._settings)
        self._prefetch: PrefetchScheduler[T] = PrefetchScheduler(
            self._fetcher,
            self._state,
            self._cache,
            self._settings,
            spawn=self._spawn,
            clock=clock,
            sleep=sleep,
        )
        self._filter_debouncer = Debouncer(
            self._apply_filters,
            self._settings.filter_debounce,
            sleep=sleep,
            spawn=self._spawn,
        )
        self._exports = ExportService(self._client)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> TableState[T]:
        return self._state

    @property
    def settings(self) -> TableSettings:
        return self._settings

    @property
    def cache(self) -> WindowCache[T]:
        return self._cache

    @property
    def rows(self) -> list[T]:
        """Full dataset in full-client mode, the current page otherwise."""
        if self._state.is_client_side:
            return self._state.all_rows
        return self._state.page_rows

    @property
    def total_records(self) -> int:
        return self._state.total_records

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def mode(self) -> TablePhase:
        return self._state.phase

    @property
    def is_lazy(self) -> bool:
        return not self._state.is_client_side

    @property
    def current_page(self) -> int:
        return self._state.current_page

    @property
    def per_page(self) -> int:
        return self._state.per_page

    @property
    def sorts(self) -> tuple[SortSpec, ...]:
        return tuple(self._state.sorts)

    @property
    def filters(self) -> dict[str, FilterSpec]:
        return dict(self._state.filters)

    @property
    def selected_rows(self) -> list[T]:
        return self._state.selected_rows

    @selected_rows.setter
    def selected_rows(self, rows: Iterable[T]) -> None:
        self._state.selected_rows = list(rows)

    @property
    def hidden_columns(self) -> list[str]:
        return self._state.hidden_columns

    @property
    def columns(self) -> list[ColumnDefinition]:
        return list(self._columns)

    @property
    def visible_columns(self) -> list[ColumnDefinition]:
        hidden = set(self._state.hidden_columns)
        return [column for column in self._columns if column.field not in hidden]

    @property
    def bulk_actions(self) -> tuple[str, ...]:
        return self._bulk_actions

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> FetchOutcome:
        """Initial load: classify the dataset and fetch the first rows."""
        return await self._classify()

    async def refresh(self) -> FetchOutcome:
        """Drop selection and cached windows, then classify the dataset again."""
        state = self._state
        state.selected_rows = []
        state.current_page = 1
        self._invalidate()
        state.refreshing = True
        self._log.info("table.refresh", **state.snapshot())
        try:
            return await self._classify()
        finally:
            state.refreshing = False

    async def wait_idle(self) -> None:
        """Wait for debounced filters, prefetches and follow-up reloads."""
        current = asyncio.current_task()
        while True:
            tasks = [task for task in self._tasks if task is not current]
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
                continue
            if self._fetcher.in_flight:
                await self._fetcher.wait_idle()
                continue
            return

    async def close(self) -> None:
        if self._state.phase is TablePhase.CLOSED:
            return
        self._state.transition(TablePhase.CLOSED)
        self._fetcher.close()
        self._reload_pending = False
        self._filter_debouncer.cancel()
        self._prefetch.cancel()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if self._owns_client:
            await self._client.aclose()
        self._log.debug("table.closed")

    async def __aenter__(self) -> "TableController[T]":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # UI events
    # ------------------------------------------------------------------

    async def on_page(self, event: PageEvent) -> None:
        state = self._state
        state.current_page = event.page + 1
        if event.rows != state.per_page:
            self._log.debug("table.per_page_changed", previous=state.per_page, per_page=event.rows)
            state.per_page = event.rows
            self._cache.clear()
            self._fetcher.invalidate()
            self._prefetch.cancel()
        if state.is_client_side:
            return
        await self._reload()

    async def on_sort(self, event: SortEvent) -> None:
        sorts = event.sort_specs()
        if sorts is not None:
            self._state.sorts = sorts
        self._invalidate()
        await self._reload()

    def on_filter(self) -> None:
        """Schedule a reload once filter input has been quiet for a while."""
        self._filter_debouncer()

    def set_filter(self, field: str, value: Any, operator: FilterOperator | str | None = None) -> None:
        current = self._state.filters.get(field)
        if current is None:
            spec = FilterSpec(field, operator or FilterOperator.CONTAINS, value)
        elif operator is None:
            spec = current.with_value(value)
        else:
            spec = FilterSpec(field, operator, value)
        self._state.filters[field] = spec
        self.on_filter()

    def set_global_filter(self, value: str | None) -> None:
        self.set_filter(GLOBAL_FIELD, value)

    def toggle_column(self, field: str) -> bool:
        """Show or hide *field*; returns ``True`` when it is now visible."""
        if field not in {column.field for column in self._columns}:
            raise ValueError(f"Unknown column: {field!r}")
        hidden = self._state.hidden_columns
        if field in hidden:
            hidden.remove(field)
            return True
        hidden.append(field)
        return False

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def perform_bulk_action(self, action: str) -> bool:
        """POST the selected row ids to ``<endpoint>/bulk`` and refresh on success."""
        if self._bulk_actions and action not in self._bulk_actions:
            raise ValueError(f"Unknown bulk action: {action!r}")
        selected = self._state.selected_rows
        if not selected:
            return False

        ids = [cell_value(row, self._settings.id_field) for row in selected]
        try:
            await self._client.post_json(self._url("bulk"), {"action": action, "ids": ids})
        except ValidationError as exc:
            self._log.warning("bulk.rejected", action=action, errors=exc.errors)
            self._notify(Severity.ERROR, "Bulk action failed", exc.describe())
            return False
        except FetchError as exc:
            self._log.error("bulk.failed", action=action, **exc.to_dict())
            self._notify(Severity.ERROR, "Bulk action failed", exc.message)
            return False

        self._log.info("bulk.completed", action=action, count=len(ids))
        self._notifier.notify(Notice(Severity.SUCCESS, "Bulk action completed"))
        await self.refresh()
        return True

    async def export_data(
        self,
        export_all: bool = False,
        visible_only: bool = False,
        destination: str | Path | None = None,
    ) -> Path | None:
        """Write a CSV export and return its path, or ``None`` on failure.

        Full-client mode writes the resident rows (every row with
        *export_all*, the current page otherwise). Other modes download
        ``<endpoint>/export`` with the current sort and filter state.
        """
        target = Path(destination) if destination is not None else Path(self._settings.export_filename)
        columns = self.visible_columns if visible_only else self._columns
        try:
            if self._state.is_client_side:
                rows = self._state.all_rows if export_all else self._client_page()
                request = ExportRequest(
                    columns=[ExportColumn(column.field, column.label) for column in columns],
                    rows=rows,
                    filename=target.name,
                )
                return self._exports.write_csv(request, target)
            params = encode_query(self._export_params(export_all, visible_only))
            return await self._exports.download(self._url("export"), target, params)
        except (FetchError, ExportError) as exc:
            self._log.error("export.failed", path=str(target), **exc.to_dict())
            self._notify(Severity.ERROR, "Export failed", exc.message)
            return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _invalidate(self) -> None:
        self._cache.clear()
        self._state.current_page = 1
        self._fetcher.invalidate()
        self._prefetch.cancel()

    async def _apply_filters(self) -> None:
        self._invalidate()
        await self._reload()

    async def _classify(self) -> FetchOutcome:
        outcome = await self._selector.select()
        if outcome is FetchOutcome.SKIPPED:
            self._reload_pending = True
        return outcome

    async def _reload(self) -> None:
        """Bring rows in line with the current page, sort and filter state."""
        phase = self._state.phase
        if phase is TablePhase.HYBRID_SERVER:
            outcome = await self._load_current_page()
        elif phase is TablePhase.CLASSIFYING:
            outcome = await self._selector.select()
        else:
            return
        if outcome is FetchOutcome.SKIPPED:
            self._reload_pending = True

    async def _load_current_page(self) -> FetchOutcome:
        state = self._state
        page = state.current_page
        geometry = self._fetcher.geometry
        if self._cache.has(geometry.window_index(page)):
            state.page_rows = self._cache.page_rows(page, geometry)
            self._prefetch.maybe_prefetch(page)
            return FetchOutcome.APPLIED

        # Miss: fetch the window holding the page.
        outcome = await self._fetcher.fetch(page, FetchKind.WINDOW)
        if outcome is FetchOutcome.APPLIED and state.current_page == page:
            state.page_rows = self._cache.page_rows(page, geometry)
            self._prefetch.maybe_prefetch(page)
        return outcome

    def _on_fetch_settled(self) -> None:
        if not self._reload_pending or self._state.phase is TablePhase.CLOSED:
            return
        self._reload_pending = False
        self._log.debug("table.reload_pending")
        self._spawn(self._reload())

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.error("task.failed", exc_info=exc)

    def _client_page(self) -> list[T]:
        per_page = self._state.per_page
        start = (self._state.current_page - 1) * per_page
        return self._state.all_rows[start : start + per_page]

    def _export_params(self, export_all: bool, visible_only: bool) -> dict[str, Any]:
        filters = self._state.filters
        search = filters.get(GLOBAL_FIELD)
        term = search.value.strip() if search is not None and isinstance(search.value, str) else ""
        params: dict[str, Any] = {
            "export_all": export_all,
            "visible_only": visible_only,
            "sorts": json.dumps([{"field": s.field, "order": s.direction.value} for s in self._state.sorts]),
            "filters": json.dumps(
                {field: {"value": spec.value, "matchMode": spec.operator.value} for field, spec in filters.items()},
                default=str,
            ),
            "search": term or None,
        }
        params.update(self._initial_params)
        return params

    def _url(self, suffix: str) -> str:
        return f"{self._endpoint.rstrip('/')}/{suffix}"

    def _notify(self, severity: Severity, summary: str, detail: str | None = None) -> None:
        self._notifier.notify(
            Notice(
                severity=severity,
                summary=summary,
                detail=detail,
                life_ms=self._settings.error_notice_life_ms,
            )
        )
