"""Unit tests for TableHttpClient error mapping."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
import pytest
import respx

from mp_datatable.fetch import TableHttpClient
from mp_datatable.kernel.errors import (
    ClientError,
    RequestTimeoutError,
    ResponseShapeError,
    ServerError,
    TransportError,
    ValidationError,
)

BASE = "https://api.test"


def _get(path: str = "/students", **kwargs: Any) -> Any:
    async def run() -> Any:
        async with TableHttpClient(base_url=BASE) as client:
            return await client.get_json(path, **kwargs)

    return asyncio.run(run())


class TestGetJson:
    def test_decodes_body_and_sends_params(self) -> None:
        with respx.mock(base_url=BASE) as router:
            route = router.get("/students").mock(return_value=httpx.Response(200, json={"data": [], "total": 0}))
            body = _get(params=[("page", "1"), ("sort[]", "name:asc")])

        assert body == {"data": [], "total": 0}
        sent = route.calls.last.request.url.params
        assert sent.get_list("sort[]") == ["name:asc"]
        assert sent["page"] == "1"

    def test_5xx_is_retryable_server_error(self) -> None:
        with respx.mock(base_url=BASE) as router:
            router.get("/students").mock(return_value=httpx.Response(503, json={"message": "Down for maintenance"}))
            with pytest.raises(ServerError) as info:
                _get()

        assert info.value.status_code == 503
        assert info.value.retryable
        assert info.value.message == "Down for maintenance"

    def test_4xx_is_not_retryable(self) -> None:
        with respx.mock(base_url=BASE) as router:
            router.get("/students").mock(return_value=httpx.Response(403))
            with pytest.raises(ClientError) as info:
                _get()

        assert not info.value.retryable
        assert info.value.status_code == 403
        assert "403" in info.value.message

    def test_422_carries_field_errors(self) -> None:
        body = {"message": "The given data was invalid.", "errors": {"per_page": ["must be at most 500"]}}
        with respx.mock(base_url=BASE) as router:
            router.get("/students").mock(return_value=httpx.Response(422, json=body))
            with pytest.raises(ValidationError) as info:
                _get()

        assert info.value.errors == {"per_page": ["must be at most 500"]}
        assert info.value.status_code == 422
        assert info.value.describe() == "per_page: must be at most 500"

    def test_connection_failure_is_transport_error(self) -> None:
        with respx.mock(base_url=BASE) as router:
            router.get("/students").mock(side_effect=httpx.ConnectError("connection refused"))
            with pytest.raises(TransportError) as info:
                _get()

        assert info.value.status_code == 0
        assert info.value.retryable

    def test_timeout_is_retryable_timeout_error(self) -> None:
        with respx.mock(base_url=BASE) as router:
            router.get("/students").mock(side_effect=httpx.ReadTimeout("too slow"))
            with pytest.raises(RequestTimeoutError) as info:
                _get()

        assert info.value.retryable
        assert isinstance(info.value, TransportError)

    def test_invalid_json_is_shape_error(self) -> None:
        with respx.mock(base_url=BASE) as router:
            router.get("/students").mock(return_value=httpx.Response(200, text="<html>oops</html>"))
            with pytest.raises(ResponseShapeError):
                _get()


class TestPostJson:
    def test_posts_payload(self) -> None:
        async def run() -> Any:
            async with TableHttpClient(base_url=BASE) as client:
                return await client.post_json("/students/bulk", {"action": "archive", "ids": [1, 2]})

        with respx.mock(base_url=BASE) as router:
            route = router.post("/students/bulk").mock(return_value=httpx.Response(200, json={"updated": 2}))
            result = asyncio.run(run())

        assert result == {"updated": 2}
        assert json.loads(route.calls.last.request.content) == {"action": "archive", "ids": [1, 2]}

    def test_empty_body_returns_none(self) -> None:
        async def run() -> Any:
            async with TableHttpClient(base_url=BASE) as client:
                return await client.post_json("/students/bulk", {"action": "archive", "ids": [1]})

        with respx.mock(base_url=BASE) as router:
            router.post("/students/bulk").mock(return_value=httpx.Response(204))
            assert asyncio.run(run()) is None


class TestDownload:
    def test_streams_body_to_file(self, tmp_path: Path) -> None:
        target = tmp_path / "students.csv"

        async def run() -> Path:
            async with TableHttpClient(base_url=BASE) as client:
                return await client.download("/students/export", target, params=[("export_all", "true")])

        with respx.mock(base_url=BASE) as router:
            route = router.get("/students/export").mock(return_value=httpx.Response(200, content=b"id,name\n1,Ada\n"))
            assert asyncio.run(run()) == target

        assert target.read_bytes() == b"id,name\n1,Ada\n"
        assert route.calls.last.request.url.params["export_all"] == "true"
        assert not (tmp_path / "students.csv.part").exists()

    def test_error_status_raises_and_writes_nothing(self, tmp_path: Path) -> None:
        target = tmp_path / "students.csv"

        async def run() -> None:
            async with TableHttpClient(base_url=BASE) as client:
                await client.download("/students/export", target)

        with respx.mock(base_url=BASE) as router:
            router.get("/students/export").mock(return_value=httpx.Response(500, json={"message": "Export crashed"}))
            with pytest.raises(ServerError, match="Export crashed"):
                asyncio.run(run())

        assert not target.exists()
        assert not (tmp_path / "students.csv.part").exists()

    def test_broken_stream_keeps_previous_file(self, tmp_path: Path) -> None:
        target = tmp_path / "students.csv"
        target.write_bytes(b"old")

        async def body() -> Any:
            yield b"id,name\n"
            raise httpx.ReadError("connection reset")

        async def run() -> None:
            async with TableHttpClient(base_url=BASE) as client:
                await client.download("/students/export", target)

        with respx.mock(base_url=BASE) as router:
            router.get("/students/export").mock(return_value=httpx.Response(200, content=body()))
            with pytest.raises(TransportError):
                asyncio.run(run())

        assert target.read_bytes() == b"old"
        assert not (tmp_path / "students.csv.part").exists()
