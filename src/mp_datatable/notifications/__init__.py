"""Notifications – notice model and notifier port."""
from mp_datatable.notifications.notice import InMemoryNotifier, LoggingNotifier, Notice, Notifier, Severity

__all__ = ["InMemoryNotifier", "LoggingNotifier", "Notice", "Notifier", "Severity"]
