"""Query – UI filter operators and their backend tokens."""
from __future__ import annotations

from enum import Enum
from typing import assert_never

from mp_datatable.observability.logging import get_logger

logger = get_logger(__name__)


class BackendOperator(str, Enum):
    """Operator tokens understood by the remote endpoint's filter DSL."""

    EQ = "$eq"
    EQC = "$eqc"
    NE = "$ne"
    LT = "$lt"
    LTE = "$lte"
    GT = "$gt"
    GTE = "$gte"
    IN = "$in"
    NOT_IN = "$notIn"
    CONTAINS = "$contains"
    NOT_CONTAINS = "$notContains"
    CONTAINSC = "$containsc"
    NOT_CONTAINSC = "$notContainsc"
    STARTS_WITH = "$startsWith"
    STARTS_WITHC = "$startsWithc"
    ENDS_WITH = "$endsWith"
    ENDS_WITHC = "$endsWithc"
    NULL = "$null"
    NOT_NULL = "$notNull"
    BETWEEN = "$between"
    NOT_BETWEEN = "$notBetween"


class FilterOperator(str, Enum):
    """Match modes a table column filter can be set to."""

    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    CONTAINS_CI = "containsCaseInsensitive"
    NOT_CONTAINS_CI = "notContainsCaseInsensitive"
    STARTS_WITH = "startsWith"
    STARTS_WITH_CI = "startsWithCaseInsensitive"
    ENDS_WITH = "endsWith"
    ENDS_WITH_CI = "endsWithCaseInsensitive"
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    EQUALS_CI = "equalsCaseInsensitive"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    IN = "in"
    NOT_IN = "notIn"
    BETWEEN = "between"
    NOT_BETWEEN = "notBetween"
    IS = "is"
    IS_NOT = "isNot"
    DATE_IS = "dateIs"
    DATE_IS_NOT = "dateIsNot"
    DATE_BEFORE = "dateBefore"
    DATE_AFTER = "dateAfter"

    @classmethod
    def parse(cls, raw: "FilterOperator | str | None") -> "FilterOperator":
        """Resolve a match-mode string; unknown values fail closed to EQUALS."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            logger.warning("filter.unknown_operator", operator=raw, fallback=cls.EQUALS.value)
            return cls.EQUALS

    @property
    def token(self) -> BackendOperator:
        return backend_operator(self)


def backend_operator(op: FilterOperator) -> BackendOperator:  # noqa: PLR0911, PLR0912
    """Map *op* to its single backend token."""
    match op:
        case FilterOperator.CONTAINS:
            return BackendOperator.CONTAINS
        case FilterOperator.NOT_CONTAINS:
            return BackendOperator.NOT_CONTAINS
        case FilterOperator.CONTAINS_CI:
            return BackendOperator.CONTAINSC
        case FilterOperator.NOT_CONTAINS_CI:
            return BackendOperator.NOT_CONTAINSC
        case FilterOperator.STARTS_WITH:
            return BackendOperator.STARTS_WITH
        case FilterOperator.STARTS_WITH_CI:
            return BackendOperator.STARTS_WITHC
        case FilterOperator.ENDS_WITH:
            return BackendOperator.ENDS_WITH
        case FilterOperator.ENDS_WITH_CI:
            return BackendOperator.ENDS_WITHC
        case FilterOperator.EQUALS | FilterOperator.DATE_IS:
            return BackendOperator.EQ
        case FilterOperator.NOT_EQUALS | FilterOperator.DATE_IS_NOT:
            return BackendOperator.NE
        case FilterOperator.EQUALS_CI:
            return BackendOperator.EQC
        case FilterOperator.LT | FilterOperator.DATE_BEFORE:
            return BackendOperator.LT
        case FilterOperator.LTE:
            return BackendOperator.LTE
        case FilterOperator.GT | FilterOperator.DATE_AFTER:
            return BackendOperator.GT
        case FilterOperator.GTE:
            return BackendOperator.GTE
        case FilterOperator.IN:
            return BackendOperator.IN
        case FilterOperator.NOT_IN:
            return BackendOperator.NOT_IN
        case FilterOperator.BETWEEN:
            return BackendOperator.BETWEEN
        case FilterOperator.NOT_BETWEEN:
            return BackendOperator.NOT_BETWEEN
        case FilterOperator.IS:
            return BackendOperator.NULL
        case FilterOperator.IS_NOT:
            return BackendOperator.NOT_NULL
        case _:
            assert_never(op)


__all__ = ["BackendOperator", "FilterOperator", "backend_operator"]
