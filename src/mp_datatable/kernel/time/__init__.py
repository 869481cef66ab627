"""Kernel time – clock abstraction."""
from mp_datatable.kernel.time.clock import Clock, ManualClock, SystemClock

__all__ = ["Clock", "ManualClock", "SystemClock"]
