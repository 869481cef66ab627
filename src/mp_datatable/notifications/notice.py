"""Notifications – user-facing notices raised by the table engine."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from mp_datatable.observability.logging import get_logger

__all__ = [
    "InMemoryNotifier",
    "LoggingNotifier",
    "Notice",
    "Notifier",
    "Severity",
]


class Severity(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A dismissible toast-style message for the UI."""

    severity: Severity
    summary: str
    detail: str | None = None
    life_ms: int | None = None


@runtime_checkable
class Notifier(Protocol):
    """Port: surface a notice to whoever renders the table."""

    def notify(self, notice: Notice) -> None: ...


class LoggingNotifier:
    """Default notifier: writes notices to the structured log."""

    def __init__(self) -> None:
        self._log = get_logger(__name__)

    def notify(self, notice: Notice) -> None:
        method = self._log.error if notice.severity is Severity.ERROR else self._log.info
        method(
            "notice",
            severity=notice.severity.value,
            summary=notice.summary,
            detail=notice.detail,
        )


class InMemoryNotifier:
    """Notifier that captures notices, for tests and headless use."""

    def __init__(self) -> None:
        self.sent: list[Notice] = []

    def notify(self, notice: Notice) -> None:
        self.sent.append(notice)

    def reset(self) -> None:
        self.sent.clear()

    def of(self, severity: Severity) -> list[Notice]:
        return [n for n in self.sent if n.severity is severity]

    @property
    def count(self) -> int:
        return len(self.sent)
