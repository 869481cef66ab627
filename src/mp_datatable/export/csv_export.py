"""Export – CsvExporter."""
from __future__ import annotations

import csv
import io

from mp_datatable.export.request import ExportRequest
from mp_datatable.state import cell_value

__all__ = ["CsvExporter"]


class CsvExporter:
    """Renders rows into CSV bytes (in-memory)."""

    def __init__(
        self,
        delimiter: str = ",",
        quoting: int = csv.QUOTE_MINIMAL,
        *,
        bom: bool = False,
    ) -> None:
        self._delimiter = delimiter
        self._quoting = quoting
        self._bom = bom

    def render(self, request: ExportRequest) -> bytes:
        """Return the complete CSV content as bytes (UTF-8, optional BOM)."""
        buf = io.StringIO()
        if self._bom:
            buf.write("\ufeff")  # BOM for Excel compatibility

        writer = csv.writer(buf, delimiter=self._delimiter, quoting=self._quoting)
        writer.writerow([col.header for col in request.columns])

        for row in request.rows:
            writer.writerow([_cell(row, col.key) for col in request.columns])

        return buf.getvalue().encode("utf-8")


def _cell(row: object, key: str) -> object:
    value = cell_value(row, key)
    return "" if value is None else value
