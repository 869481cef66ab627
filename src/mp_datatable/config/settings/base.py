"""Config settings – Settings base class."""
from __future__ import annotations

import dataclasses
from typing import Any, ClassVar, TypeVar

S = TypeVar("S", bound="Settings")


@dataclasses.dataclass(frozen=True)
class Settings:
    """Base class for env-driven settings dataclasses."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""

    def with_overrides(self: S, **changes: Any) -> S:
        """Return a validated copy with *changes* applied."""
        return dataclasses.replace(self, **changes)


__all__ = ["Settings"]
