"""Engine – Debouncer and Throttler built on cancellable asyncio tasks.

Both primitives hand their timer coroutines to a *spawn* callable so the
owning controller can track every task and cancel them on teardown.
"""
from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, Awaitable, Callable

from mp_datatable.fetch.retry import Sleep
from mp_datatable.kernel.time import Clock, SystemClock

Spawn = Callable[[Coroutine[Any, Any, Any]], "asyncio.Task[Any]"]

__all__ = ["Debouncer", "Spawn", "Throttler"]


class Debouncer:
    """Run *func* once, *delay* seconds after the last call.

    Each call restarts the timer. A call arriving while *func* is already
    running does not cancel it; it schedules a fresh run instead.
    """

    def __init__(
        self,
        func: Callable[[], Awaitable[Any]],
        delay: float,
        *,
        sleep: Sleep | None = None,
        spawn: Spawn | None = None,
    ) -> None:
        self._func = func
        self._delay = delay
        self._sleep: Sleep = sleep or asyncio.sleep
        self._spawn: Spawn = spawn or asyncio.ensure_future
        self._timer: asyncio.Task[Any] | None = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def __call__(self) -> None:
        self.cancel()
        self._timer = self._spawn(self._run())

    async def flush(self) -> None:
        """Run a pending call right away."""
        if self.pending:
            self.cancel()
            await self._func()

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _run(self) -> None:
        await self._sleep(self._delay)
        if self._timer is asyncio.current_task():
            self._timer = None
        await self._func()


class Throttler:
    """Call *func* at most once per *interval*, leading and trailing edge.

    The first call in a quiet period runs immediately. Calls inside the
    interval collapse into one trailing call carrying the latest arguments.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        interval: float,
        *,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
        spawn: Spawn | None = None,
    ) -> None:
        self._func = func
        self._interval = interval
        self._clock: Clock = clock or SystemClock()
        self._sleep: Sleep = sleep or asyncio.sleep
        self._spawn: Spawn = spawn or asyncio.ensure_future
        self._last: float | None = None
        self._pending_args: tuple[Any, ...] | None = None
        self._trailing: asyncio.Task[Any] | None = None

    @property
    def pending(self) -> bool:
        return self._trailing is not None

    def __call__(self, *args: Any) -> None:
        now = self._clock.monotonic()
        if self._last is None or now - self._last >= self._interval:
            self._last = now
            self._func(*args)
            return
        self._pending_args = args
        if self._trailing is None:
            self._trailing = self._spawn(self._run_trailing(self._interval - (now - self._last)))

    def cancel(self) -> None:
        self._pending_args = None
        if self._trailing is not None:
            self._trailing.cancel()
            self._trailing = None

    def reset(self) -> None:
        """Forget the last call so the next one runs on the leading edge."""
        self.cancel()
        self._last = None

    async def _run_trailing(self, wait: float) -> None:
        await self._sleep(wait)
        self._trailing = None
        args, self._pending_args = self._pending_args, None
        if args is not None:
            self._last = self._clock.monotonic()
            self._func(*args)
