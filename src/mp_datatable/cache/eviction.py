"""Cache – eviction policies for the window cache."""
from __future__ import annotations

import abc
from collections import OrderedDict
from collections.abc import Hashable, Iterator


class EvictionPolicy(abc.ABC):
    """Tracks resident keys and names the victim when capacity is exceeded."""

    @abc.abstractmethod
    def on_insert(self, key: Hashable) -> None: ...

    @abc.abstractmethod
    def on_access(self, key: Hashable) -> None: ...

    @abc.abstractmethod
    def on_remove(self, key: Hashable) -> None: ...

    @abc.abstractmethod
    def victim(self) -> Hashable:
        """Key to evict next. Only called when at least one key is resident."""

    @abc.abstractmethod
    def clear(self) -> None: ...

    @abc.abstractmethod
    def order(self) -> Iterator[Hashable]:
        """Resident keys, next victim first."""


class LRUEvictionPolicy(EvictionPolicy):
    """Least-recently-used: reads and writes both refresh recency."""

    def __init__(self) -> None:
        self._order: OrderedDict[Hashable, None] = OrderedDict()

    def on_insert(self, key: Hashable) -> None:
        self._order[key] = None
        self._order.move_to_end(key)

    def on_access(self, key: Hashable) -> None:
        if key in self._order:
            self._order.move_to_end(key)

    def on_remove(self, key: Hashable) -> None:
        self._order.pop(key, None)

    def victim(self) -> Hashable:
        return next(iter(self._order))

    def clear(self) -> None:
        self._order.clear()

    def order(self) -> Iterator[Hashable]:
        return iter(list(self._order))


class FIFOEvictionPolicy(LRUEvictionPolicy):
    """First-in-first-out: reads do not refresh, re-inserts keep their slot."""

    def on_insert(self, key: Hashable) -> None:
        if key not in self._order:
            self._order[key] = None

    def on_access(self, key: Hashable) -> None:  # noqa: ARG002
        return None


__all__ = ["EvictionPolicy", "FIFOEvictionPolicy", "LRUEvictionPolicy"]
