"""Fetch – unwrap ``{data, total}`` payloads, optionally nested."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mp_datatable.kernel.errors import ResponseShapeError


def extract_payload(body: Any, data_property: str | None = None) -> tuple[list[Any], int]:
    """Return ``(rows, total)`` from a paginated response body.

    *data_property* is a dotted path to the object holding ``data`` and
    ``total``, e.g. ``"students"`` for ``{"students": {"data": [...], "total": 9}}``.
    A missing ``total`` reads as ``0``.
    """
    node = body
    if data_property:
        for part in data_property.split("."):
            if not isinstance(node, Mapping) or part not in node:
                raise ResponseShapeError(f"Response has no '{data_property}' property")
            node = node[part]

    if not isinstance(node, Mapping):
        raise ResponseShapeError("Response payload is not an object")

    rows = node.get("data")
    if rows is None:
        rows = []
    if not isinstance(rows, list):
        raise ResponseShapeError("Response 'data' is not a list")

    raw_total = node.get("total")
    try:
        total = int(raw_total) if raw_total is not None else 0
    except (TypeError, ValueError) as exc:
        raise ResponseShapeError(f"Response 'total' is not a number: {raw_total!r}") from exc
    return rows, total


__all__ = ["extract_payload"]
