"""Fetch – HTTP client, retry policy, response unwrapping and fetch controller."""
from mp_datatable.fetch.client import TableHttpClient
from mp_datatable.fetch.controller import FetchController, FetchKind, FetchOutcome
from mp_datatable.fetch.response import extract_payload
from mp_datatable.fetch.retry import RetryPolicy, is_retryable

__all__ = [
    "FetchController",
    "FetchKind",
    "FetchOutcome",
    "RetryPolicy",
    "TableHttpClient",
    "extract_payload",
    "is_retryable",
]
