"""Export – ExportService writes local CSV files and downloads remote exports."""
from __future__ import annotations

import time
from pathlib import Path

from mp_datatable.export.csv_export import CsvExporter
from mp_datatable.export.request import ExportRequest
from mp_datatable.fetch.client import QueryParams, TableHttpClient
from mp_datatable.kernel.errors import ExportError
from mp_datatable.observability.logging import get_logger

__all__ = ["ExportService"]

logger = get_logger(__name__)


class ExportService:
    """Produces export files either from resident rows or from the endpoint."""

    def __init__(self, client: TableHttpClient, *, bom: bool = False) -> None:
        self._client = client
        self._csv_exporter = CsvExporter(bom=bom)

    def write_csv(self, request: ExportRequest, destination: Path | None = None) -> Path:
        start = time.monotonic()
        target = destination or Path(request.filename)
        content = self._csv_exporter.render(request)
        try:
            target.write_bytes(content)
        except OSError as exc:
            raise ExportError(f"Could not write {target}", cause=exc) from exc
        logger.info(
            "export.completed",
            source="local",
            path=str(target),
            columns=len(request.columns),
            bytes=len(content),
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return target

    async def download(self, url: str, destination: Path, params: QueryParams | None = None) -> Path:
        """Stream ``GET url`` into *destination*; fetch errors propagate unchanged."""
        start = time.monotonic()
        try:
            path = await self._client.download(url, destination, params=params)
        except OSError as exc:
            raise ExportError(f"Could not write {destination}", cause=exc) from exc
        logger.info(
            "export.completed",
            source="remote",
            path=str(path),
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return path
