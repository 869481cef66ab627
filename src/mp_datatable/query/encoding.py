"""Query – nested-bracket query-string encoding.

``{"filters": {"status": {"$eq": "active"}}, "sort": ["name:asc"]}`` becomes::

    filters[status][$eq]=active
    sort[]=name:asc

so nested and multi-valued parameters survive URL transport and never
collide with a flat parameter of the same name.
"""
from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, Literal

ArrayFormat = Literal["brackets", "indices"]


def encode_query(
    params: Mapping[str, Any],
    *,
    array_format: ArrayFormat = "brackets",
) -> list[tuple[str, str]]:
    """Flatten *params* into ordered ``(key, value)`` pairs.

    ``None`` values are skipped. Lists of scalars use ``key[]`` (or
    ``key[0]`` with ``array_format="indices"``); lists of containers are
    always indexed so their members stay grouped.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        _flatten(str(key), value, pairs, array_format)
    return pairs


def _flatten(prefix: str, value: Any, pairs: list[tuple[str, str]], array_format: ArrayFormat) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            _flatten(f"{prefix}[{key}]", item, pairs, array_format)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            nested = isinstance(item, (Mapping, list, tuple))
            key = f"{prefix}[{index}]" if nested or array_format == "indices" else f"{prefix}[]"
            _flatten(key, item, pairs, array_format)
    else:
        pairs.append((prefix, _scalar(value)))


def _scalar(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


__all__ = ["ArrayFormat", "encode_query"]
