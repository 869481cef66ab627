"""Observability – structlog configuration and logger helper."""
from mp_datatable.observability.logging.factory import configure_logging
from mp_datatable.observability.logging.processors import drop_empty_values, get_logger

__all__ = ["configure_logging", "drop_empty_values", "get_logger"]
