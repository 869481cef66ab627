"""Export – CSV rendering and the export service."""
from mp_datatable.export.csv_export import CsvExporter
from mp_datatable.export.request import ExportColumn, ExportRequest
from mp_datatable.export.service import ExportService

__all__ = ["CsvExporter", "ExportColumn", "ExportRequest", "ExportService"]
