"""Query – translate UI filters and sorts into endpoint parameters."""
from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from typing import Any

from mp_datatable.query.spec import FilterSpec, SortSpec


@dataclasses.dataclass(frozen=True)
class TableQuery:
    """Translated query state, ready to merge into request parameters."""

    filters: dict[str, dict[str, Any]] = dataclasses.field(default_factory=dict)
    sort: list[str] = dataclasses.field(default_factory=list)
    search: str | None = None

    def to_params(self) -> dict[str, Any]:
        """Only the non-empty parts, keyed as the endpoint expects them."""
        params: dict[str, Any] = {}
        if self.search:
            params["search"] = self.search
        if self.sort:
            params["sort"] = list(self.sort)
        if self.filters:
            params["filters"] = {field: dict(ops) for field, ops in self.filters.items()}
        return params


def translate_query(
    filters: Iterable[FilterSpec] | Mapping[str, FilterSpec],
    sorts: Iterable[SortSpec] = (),
) -> TableQuery:
    """Build a :class:`TableQuery`; pure function of its inputs.

    The global filter becomes ``search`` (whitespace-stripped); every other
    non-empty filter becomes ``{field: {token: value}}``. Sort order is kept.
    """
    specs = filters.values() if isinstance(filters, Mapping) else filters
    translated: dict[str, dict[str, Any]] = {}
    search: str | None = None

    for spec in specs:
        if spec.is_global:
            if isinstance(spec.value, str) and spec.value.strip():
                search = spec.value.strip()
            continue
        if spec.is_empty:
            continue
        translated[spec.field] = {spec.operator.token.value: spec.value}

    return TableQuery(
        filters=translated,
        sort=[sort.token for sort in sorts],
        search=search,
    )


__all__ = ["TableQuery", "translate_query"]
