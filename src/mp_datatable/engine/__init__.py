"""Engine – mode selection, prefetch, scheduling and the public table controller."""
from mp_datatable.engine.controller import TableController
from mp_datatable.engine.events import PageEvent, SortEvent
from mp_datatable.engine.mode_selector import ModeSelector
from mp_datatable.engine.prefetch import PrefetchScheduler
from mp_datatable.engine.scheduling import Debouncer, Spawn, Throttler

__all__ = [
    "Debouncer",
    "ModeSelector",
    "PageEvent",
    "PrefetchScheduler",
    "SortEvent",
    "Spawn",
    "TableController",
    "Throttler",
]
