"""Config settings – TableSettings, the knobs of one remote table."""
from __future__ import annotations

import dataclasses

from mp_datatable.config.settings.base import Settings
from mp_datatable.config.validation import InvalidSettingValueError


@dataclasses.dataclass(frozen=True)
class TableSettings(Settings):
    """Options recognised by :class:`~mp_datatable.engine.TableController`.

    Environment variables use the ``DATATABLE_`` prefix, e.g.
    ``DATATABLE_CLIENT_SIDE_THRESHOLD=2000``.
    """

    _prefix = "datatable"

    max_retries: int = 3
    client_side_threshold: int = 1000
    window_size: int = 200
    page_size: int = 20
    cache_max_windows: int = 5
    data_property: str | None = None
    full_load_margin: int = 100
    retry_base_delay: float = 1.0
    request_timeout: float = 15.0
    prefetch_threshold: float = 0.75
    prefetch_interval: float = 0.5
    filter_debounce: float = 0.4
    id_field: str = "id"
    export_filename: str = "export.csv"
    error_notice_life_ms: int = 8000

    def _validate(self) -> None:
        for name in ("client_side_threshold", "window_size", "page_size", "cache_max_windows", "max_retries"):
            value = getattr(self, name)
            if value < 1:
                raise InvalidSettingValueError(name, value, "must be >= 1")
        if self.window_size % self.page_size != 0:
            raise InvalidSettingValueError(
                "window_size", self.window_size, f"must be a multiple of page_size ({self.page_size})"
            )
        if not 0 < self.prefetch_threshold <= 1:
            raise InvalidSettingValueError("prefetch_threshold", self.prefetch_threshold, "must be in (0, 1]")
        for name in ("retry_base_delay", "prefetch_interval", "filter_debounce", "full_load_margin"):
            value = getattr(self, name)
            if value < 0:
                raise InvalidSettingValueError(name, value, "must not be negative")
        if self.request_timeout <= 0:
            raise InvalidSettingValueError("request_timeout", self.request_timeout, "must be positive")

    @property
    def pages_per_window(self) -> int:
        return self.window_size // self.page_size

    @property
    def full_load_size(self) -> int:
        """``per_page`` of a full-load request, oversized to detect overflow."""
        return self.client_side_threshold + self.full_load_margin


__all__ = ["TableSettings"]
