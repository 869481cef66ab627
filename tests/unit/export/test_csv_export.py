"""Unit tests for CSV export."""
from __future__ import annotations

import asyncio
import csv
import io
from dataclasses import dataclass
from pathlib import Path

import httpx
import pytest
import respx

from mp_datatable.export import CsvExporter, ExportColumn, ExportRequest, ExportService
from mp_datatable.fetch import TableHttpClient
from mp_datatable.kernel.errors import ClientError, ExportError

BASE = "https://api.test"
COLUMNS = [ExportColumn("id", "ID"), ExportColumn("name", "Name")]


@dataclass
class Student:
    id: int
    name: str


def _parse(content: bytes) -> list[list[str]]:
    return list(csv.reader(io.StringIO(content.decode("utf-8"))))


class TestCsvExporter:
    def test_header_and_rows(self):
        content = CsvExporter().render(ExportRequest(COLUMNS, [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Linus"}]))
        assert _parse(content) == [["ID", "Name"], ["1", "Ada"], ["2", "Linus"]]

    def test_missing_and_none_cells_are_empty(self):
        content = CsvExporter().render(ExportRequest(COLUMNS, [{"id": 1}, {"id": 2, "name": None}]))
        assert _parse(content)[1:] == [["1", ""], ["2", ""]]

    def test_attribute_rows(self):
        content = CsvExporter().render(ExportRequest(COLUMNS, [Student(7, "Grace")]))
        assert _parse(content)[1] == ["7", "Grace"]

    def test_quotes_special_characters(self):
        content = CsvExporter().render(ExportRequest(COLUMNS, [{"id": 1, "name": 'Smith, "Jr"'}]))
        assert 'Smith, ""Jr""' in content.decode("utf-8")
        assert _parse(content)[1] == ["1", 'Smith, "Jr"']

    def test_custom_delimiter(self):
        content = CsvExporter(delimiter=";").render(ExportRequest(COLUMNS, [{"id": 1, "name": "Ada"}]))
        assert content.decode("utf-8").splitlines()[1] == "1;Ada"

    def test_bom(self):
        content = CsvExporter(bom=True).render(ExportRequest(COLUMNS, []))
        assert content.startswith(b"\xef\xbb\xbf")

    def test_rows_may_be_a_generator(self):
        rows = ({"id": n, "name": f"row-{n}"} for n in range(3))
        assert len(_parse(CsvExporter().render(ExportRequest(COLUMNS, rows)))) == 4


class TestExportService:
    def test_write_csv(self, tmp_path: Path):
        async def run() -> Path:
            async with TableHttpClient(base_url=BASE) as client:
                return ExportService(client).write_csv(
                    ExportRequest(COLUMNS, [{"id": 1, "name": "Ada"}]), tmp_path / "out.csv"
                )

        target = asyncio.run(run())
        assert _parse(target.read_bytes())[1] == ["1", "Ada"]

    def test_unwritable_destination(self, tmp_path: Path):
        async def run() -> None:
            async with TableHttpClient(base_url=BASE) as client:
                ExportService(client).write_csv(ExportRequest(COLUMNS, []), tmp_path / "missing" / "out.csv")

        with pytest.raises(ExportError):
            asyncio.run(run())

    def test_download_streams_body(self, tmp_path: Path):
        async def run() -> Path:
            async with TableHttpClient(base_url=BASE) as client:
                return await ExportService(client).download("/students/export", tmp_path / "dl.csv", [("export_all", "true")])

        with respx.mock(base_url=BASE) as router:
            route = router.get("/students/export").mock(return_value=httpx.Response(200, content=b"ID\n1\n"))
            target = asyncio.run(run())

        assert target.read_bytes() == b"ID\n1\n"
        assert route.calls.last.request.url.params["export_all"] == "true"

    def test_download_error_propagates(self, tmp_path: Path):
        async def run() -> Path:
            async with TableHttpClient(base_url=BASE) as client:
                return await ExportService(client).download("/students/export", tmp_path / "dl.csv")

        with respx.mock(base_url=BASE) as router:
            router.get("/students/export").mock(return_value=httpx.Response(403, json={"message": "Forbidden"}))
            with pytest.raises(ClientError, match="Forbidden"):
                asyncio.run(run())
        assert not (tmp_path / "dl.csv").exists()
