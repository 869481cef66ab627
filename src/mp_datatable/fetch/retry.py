"""Fetch – RetryPolicy backed by ``tenacity``.

Delays grow as ``base_delay * 2^(attempt - 1)``; only errors flagged
``retryable`` (transport failures, timeouts, 5xx) are retried.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Protocol, TypeVar

import tenacity

from mp_datatable.kernel.errors import FetchError
from mp_datatable.observability.logging import get_logger

T = TypeVar("T")
logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class RetryListener(Protocol):
    def __call__(self, attempt: int, max_attempts: int, exc: BaseException, delay: float) -> None: ...


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, FetchError) and exc.retryable


class RetryPolicy:
    """Bounded exponential-backoff retry for a single async call.

    Parameters
    ----------
    max_attempts:
        Total attempts, the first call included.
    base_delay:
        Seconds to wait after the first failure; doubles on each further one.
    max_delay:
        Cap on any single wait.
    sleep:
        Awaitable used to wait; tests inject a recorder to avoid real sleeps.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        sleep: Sleep | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep: Sleep = sleep or asyncio.sleep

    def delay_for(self, attempt: int) -> float:
        """Wait after the *attempt*-th failure (1-based)."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    def _build_retrying(self, on_retry: RetryListener | None) -> tenacity.AsyncRetrying:
        def _before_sleep(retry_state: tenacity.RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.debug(
                "retry.scheduled",
                attempt=retry_state.attempt_number,
                max_attempts=self.max_attempts,
                delay=delay,
                exc=repr(exc),
            )
            if on_retry is not None and exc is not None:
                on_retry(retry_state.attempt_number, self.max_attempts, exc, delay)

        return tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.max_attempts),
            wait=tenacity.wait_exponential(multiplier=self.base_delay, exp_base=2, max=self.max_delay),
            retry=tenacity.retry_if_exception(is_retryable),
            before_sleep=_before_sleep,
            sleep=self._sleep,
            reraise=True,
        )

    async def execute(self, func: Callable[[], Awaitable[T]], *, on_retry: RetryListener | None = None) -> T:
        """Run *func*, retrying retryable failures; the last error is re-raised."""
        async for attempt in self._build_retrying(on_retry):
            with attempt:
                result = await func()
        return result  # type: ignore[return-value]


__all__ = ["RetryListener", "RetryPolicy", "Sleep", "is_retryable"]
