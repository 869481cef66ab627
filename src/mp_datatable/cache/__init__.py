"""Cache – window cache, eviction policies and window geometry."""
from mp_datatable.cache.eviction import EvictionPolicy, FIFOEvictionPolicy, LRUEvictionPolicy
from mp_datatable.cache.geometry import WindowGeometry
from mp_datatable.cache.window_cache import WindowCache

__all__ = ["EvictionPolicy", "FIFOEvictionPolicy", "LRUEvictionPolicy", "WindowCache", "WindowGeometry"]
