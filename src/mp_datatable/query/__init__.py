"""Query – filter/sort vocabulary, translation and query-string encoding."""
from mp_datatable.query.encoding import ArrayFormat, encode_query
from mp_datatable.query.operators import BackendOperator, FilterOperator, backend_operator
from mp_datatable.query.spec import GLOBAL_FIELD, FilterSpec, SortDirection, SortSpec, is_empty_value
from mp_datatable.query.translator import TableQuery, translate_query

__all__ = [
    "ArrayFormat",
    "BackendOperator",
    "FilterOperator",
    "FilterSpec",
    "GLOBAL_FIELD",
    "SortDirection",
    "SortSpec",
    "TableQuery",
    "backend_operator",
    "encode_query",
    "is_empty_value",
    "translate_query",
]
