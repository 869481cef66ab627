"""Kernel error hierarchy — public re-export surface.

Hierarchy::

    BaseError
    ├── FetchError               (fetch.py)
    │   ├── TransportError       retryable
    │   │   └── RequestTimeoutError
    │   ├── ServerError          retryable (5xx)
    │   ├── ClientError          4xx
    │   │   └── ValidationError  422
    │   └── ResponseShapeError
    └── TableError               (table.py)
        ├── InvalidTransitionError
        └── ExportError
"""

from mp_datatable.kernel.errors.base import BaseError
from mp_datatable.kernel.errors.fetch import (
    ClientError,
    FetchError,
    RequestTimeoutError,
    ResponseShapeError,
    ServerError,
    TransportError,
    ValidationError,
)
from mp_datatable.kernel.errors.table import ExportError, InvalidTransitionError, TableError

__all__ = [
    "BaseError",
    "ClientError",
    "ExportError",
    "FetchError",
    "InvalidTransitionError",
    "RequestTimeoutError",
    "ResponseShapeError",
    "ServerError",
    "TableError",
    "TransportError",
    "ValidationError",
]
