"""Unit tests for FetchController routing, retry and single-flight behaviour."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import httpx
import pytest
import respx

from mp_datatable.cache import WindowCache
from mp_datatable.config.settings import TableSettings
from mp_datatable.fetch import FetchController, FetchKind, FetchOutcome, RetryPolicy, TableHttpClient
from mp_datatable.notifications import Severity
from mp_datatable.query import GLOBAL_FIELD, FilterOperator, FilterSpec, SortSpec
from mp_datatable.state import TableState
from mp_datatable.testing import FakeTableEndpoint, InMemoryNotifier, RecordingSleep, make_rows

BASE = "https://api.test"


class _Harness:
    def __init__(
        self,
        settings: TableSettings,
        client: TableHttpClient,
        sleep: Callable[[float], Awaitable[Any]],
        **kwargs: Any,
    ) -> None:
        self.settings = settings
        self.state: TableState[Any] = TableState(per_page=settings.page_size)
        self.cache: WindowCache[Any] = WindowCache(settings.cache_max_windows)
        self.notifier = InMemoryNotifier()
        self.settled = 0
        self.fetcher: FetchController[Any] = FetchController(
            "/students",
            self.state,
            self.cache,
            client,
            settings,
            retry=RetryPolicy(settings.max_retries, settings.retry_base_delay, sleep=sleep),
            notifier=self.notifier,
            on_settled=self._on_settled,
            **kwargs,
        )

    def _on_settled(self) -> None:
        self.settled += 1


def _run(
    endpoint: Callable[[httpx.Request], httpx.Response],
    scenario: Callable[[_Harness], Awaitable[Any]],
    *,
    settings: TableSettings | None = None,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
    **kwargs: Any,
) -> Any:
    async def run() -> Any:
        async with TableHttpClient(base_url=BASE) as client:
            harness = _Harness(settings or TableSettings(), client, sleep or RecordingSleep(), **kwargs)
            return await scenario(harness)

    with respx.mock(base_url=BASE, assert_all_called=False) as router:
        router.get("/students").mock(side_effect=endpoint)
        return asyncio.run(run())


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


class TestRouting:
    def test_page_fetch_fills_page_buffer(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(45))

        async def scenario(h: _Harness) -> None:
            assert await h.fetcher.fetch(2, FetchKind.PAGE) is FetchOutcome.APPLIED
            assert [row["id"] for row in h.state.page_rows] == list(range(21, 41))
            assert h.state.total_records == 45
            assert len(h.cache) == 0

        _run(endpoint, scenario)
        assert endpoint.param("page") == "2"
        assert endpoint.param("per_page") == "20"
        assert endpoint.param("full_load") is None

    def test_window_fetch_fills_cache_at_window_index(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(5000))

        async def scenario(h: _Harness) -> None:
            assert await h.fetcher.fetch(11, FetchKind.WINDOW) is FetchOutcome.APPLIED
            assert h.cache.indexes() == [2]
            window = h.cache.get(2)
            assert window is not None
            assert window[0]["id"] == 201
            assert len(window) == 200
            assert h.state.page_rows == []

        _run(endpoint, scenario)
        assert endpoint.param("page") == "2"
        assert endpoint.param("per_page") == "200"

    def test_window_fetch_keeps_total_when_omitted(self) -> None:
        def endpoint(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": make_rows(200)})

        async def scenario(h: _Harness) -> None:
            h.state.total_records = 5000
            await h.fetcher.fetch(1, FetchKind.WINDOW)
            assert h.state.total_records == 5000

        _run(endpoint, scenario)

    def test_page_fetch_total_defaults_to_zero(self) -> None:
        def endpoint(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": make_rows(3)})

        async def scenario(h: _Harness) -> None:
            h.state.total_records = 99
            await h.fetcher.fetch(1, FetchKind.PAGE)
            assert h.state.total_records == 0

        _run(endpoint, scenario)

    def test_full_fetch_fills_all_rows_with_current_query(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(500))

        async def scenario(h: _Harness) -> None:
            h.state.filters = {"status": FilterSpec("status", FilterOperator.EQUALS, "active")}
            h.state.sorts = [SortSpec("name")]
            assert await h.fetcher.fetch(1, FetchKind.FULL) is FetchOutcome.APPLIED
            assert len(h.state.all_rows) == 500
            assert h.state.total_records == 500

        _run(endpoint, scenario)
        params = dict(endpoint.params())
        assert params == {
            "page": "1",
            "per_page": "1100",
            "sort[]": "name:asc",
            "filters[status][$eq]": "active",
            "full_load": "true",
        }

    def test_full_fetch_total_falls_back_to_row_count(self) -> None:
        def endpoint(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": make_rows(7), "total": 0})

        async def scenario(h: _Harness) -> None:
            await h.fetcher.fetch(1, FetchKind.FULL)
            assert h.state.total_records == 7

        _run(endpoint, scenario)

    def test_data_property_unwrapped(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(30), data_property="students")

        async def scenario(h: _Harness) -> None:
            await h.fetcher.fetch(1, FetchKind.PAGE)
            assert len(h.state.page_rows) == 20
            assert h.state.total_records == 30

        _run(endpoint, scenario, settings=TableSettings(data_property="students"))


class TestRequestParams:
    def test_filters_sort_and_search(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10))

        async def scenario(h: _Harness) -> None:
            h.state.filters = {
                GLOBAL_FIELD: FilterSpec(GLOBAL_FIELD, FilterOperator.CONTAINS, " ada "),
                "status": FilterSpec("status", FilterOperator.EQUALS, "active"),
                "grade": FilterSpec("grade", FilterOperator.EQUALS, ""),
            }
            h.state.sorts = [SortSpec("name", "asc"), SortSpec("age", "desc")]
            await h.fetcher.fetch(1, FetchKind.PAGE)

        _run(endpoint, scenario)
        params = endpoint.params()
        assert ("search", "ada") in params
        assert ("filters[status][$eq]", "active") in params
        assert [value for key, value in params if key == "sort[]"] == ["name:asc", "age:desc"]
        assert not any(key.startswith("filters[grade]") for key, _ in params)

    def test_initial_params_are_sent_and_override(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10))

        async def scenario(h: _Harness) -> None:
            await h.fetcher.fetch(1, FetchKind.PAGE)

        _run(endpoint, scenario, initial_params={"school_id": 7, "per_page": 5})
        assert endpoint.param("school_id") == "7"
        assert endpoint.param("per_page") == "5"


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class TestSingleFlight:
    def test_concurrent_fetch_is_skipped(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(100))

        async def scenario(h: _Harness) -> tuple[FetchOutcome, ...]:
            return tuple(await asyncio.gather(h.fetcher.fetch(1), h.fetcher.fetch(2)))

        assert _run(endpoint, scenario) == (FetchOutcome.APPLIED, FetchOutcome.SKIPPED)
        assert endpoint.calls == 1

    def test_flags_set_during_flight_and_reset_after(self) -> None:
        seen: list[tuple[bool, bool]] = []
        harness: list[_Harness] = []
        fake = FakeTableEndpoint(make_rows(10))

        def endpoint(request: httpx.Request) -> httpx.Response:
            state = harness[0].state
            seen.append((state.loading, harness[0].fetcher.in_flight))
            return fake(request)

        async def scenario(h: _Harness) -> None:
            harness.append(h)
            await h.fetcher.fetch(1)
            assert not h.state.loading
            assert not h.state.fetching
            assert not h.fetcher.in_flight
            assert h.settled == 1

        _run(endpoint, scenario)
        assert seen == [(True, True)]

    def test_stale_response_is_discarded(self) -> None:
        harness: list[_Harness] = []
        fake = FakeTableEndpoint(make_rows(100))

        def endpoint(request: httpx.Request) -> httpx.Response:
            harness[0].fetcher.invalidate()
            return fake(request)

        async def scenario(h: _Harness) -> None:
            harness.append(h)
            assert await h.fetcher.fetch(1) is FetchOutcome.STALE
            assert h.state.page_rows == []
            assert h.state.total_records == 0
            assert h.state.error is None
            assert h.settled == 1

        _run(endpoint, scenario)

    def test_wait_idle_returns_after_flight(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10))

        async def scenario(h: _Harness) -> None:
            task = asyncio.ensure_future(h.fetcher.fetch(1))
            await asyncio.sleep(0)
            assert h.fetcher.in_flight
            await h.fetcher.wait_idle()
            assert task.done()

        _run(endpoint, scenario)

    def test_bad_page_size_raises_and_releases_the_flight(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10))

        async def scenario(h: _Harness) -> None:
            h.state.per_page = 0
            with pytest.raises(ValueError, match="per_page"):
                await h.fetcher.fetch(1)
            assert not h.fetcher.in_flight
            assert not h.state.loading
            assert not h.state.fetching
            assert h.settled == 1
            h.state.per_page = 20
            assert await h.fetcher.fetch(1) is FetchOutcome.APPLIED

        _run(endpoint, scenario)
        assert endpoint.calls == 1


class TestClose:
    def test_fetch_after_close_sends_nothing(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10))

        async def scenario(h: _Harness) -> None:
            h.fetcher.close()
            assert await h.fetcher.fetch(1) is FetchOutcome.CLOSED
            assert h.state.page_rows == []
            assert not h.state.loading
            assert h.settled == 0

        _run(endpoint, scenario)
        assert endpoint.calls == 0

    def test_close_discards_response_in_flight(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10), latency=0.01)

        async def scenario(h: _Harness) -> None:
            task = asyncio.ensure_future(h.fetcher.fetch(1))
            await asyncio.sleep(0)
            h.fetcher.close()
            assert await task is FetchOutcome.STALE
            assert h.state.page_rows == []
            assert not h.fetcher.in_flight

        _run(endpoint, scenario)
        assert endpoint.calls == 1


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_always_503_attempted_max_retries_times(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10), failures=[503] * 10)

        async def scenario(h: _Harness) -> None:
            assert await h.fetcher.fetch(1) is FetchOutcome.FAILED
            assert h.state.error == "Upstream answered 503"
            assert not h.state.loading
            assert not h.state.fetching
            notices = h.notifier.of(Severity.ERROR)
            assert len(notices) == 1
            assert notices[0].summary == "Failed to load data"
            assert notices[0].detail == "Upstream answered 503"
            assert notices[0].life_ms == 8000

        _run(endpoint, scenario)
        assert endpoint.calls == 3

    def test_one_503_then_success_surfaces_no_error(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10), failures=[503])

        async def scenario(h: _Harness) -> None:
            assert await h.fetcher.fetch(1) is FetchOutcome.APPLIED
            assert h.state.error is None
            assert h.notifier.count == 0
            assert len(h.state.page_rows) == 10

        _run(endpoint, scenario)
        assert endpoint.calls == 2

    def test_422_attempted_once(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10), failures=[422])

        async def scenario(h: _Harness) -> None:
            assert await h.fetcher.fetch(1) is FetchOutcome.FAILED
            assert h.state.error == "Upstream answered 422"

        _run(endpoint, scenario)
        assert endpoint.calls == 1

    def test_retrying_message_while_waiting(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10), failures=[503, 503])
        harness: list[_Harness] = []
        messages: list[str | None] = []

        async def sleep(seconds: float) -> None:
            messages.append(harness[0].state.error)

        async def scenario(h: _Harness) -> None:
            harness.append(h)
            assert await h.fetcher.fetch(1) is FetchOutcome.APPLIED
            assert h.state.error is None

        _run(endpoint, scenario, sleep=sleep)
        assert messages == ["Retrying... (1/3)", "Retrying... (2/3)"]

    def test_backoff_delays(self) -> None:
        endpoint = FakeTableEndpoint(make_rows(10), failures=[503, 503, 503])
        sleep = RecordingSleep()

        async def scenario(h: _Harness) -> None:
            await h.fetcher.fetch(1)

        _run(endpoint, scenario, sleep=sleep)
        assert sleep.delays == [1.0, 2.0]

    def test_malformed_payload_fails_without_retry(self) -> None:
        def endpoint(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": "not-a-list"})

        async def scenario(h: _Harness) -> None:
            assert await h.fetcher.fetch(1) is FetchOutcome.FAILED
            assert not h.state.loading
            assert h.state.error == "Response 'data' is not a list"

        _run(endpoint, scenario)
