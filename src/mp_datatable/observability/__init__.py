"""Observability – structured logging for the table engine."""
from mp_datatable.observability.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
