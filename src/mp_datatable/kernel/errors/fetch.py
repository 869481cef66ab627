"""Fetch errors — failures talking to the remote table endpoint.

Only :class:`TransportError` (no response / status 0, including timeouts)
and :class:`ServerError` (5xx) are retryable.
"""

from __future__ import annotations

from typing import Any

from mp_datatable.kernel.errors.base import BaseError


class FetchError(BaseError):
    """A request against the remote endpoint failed."""

    default_code = "fetch_error"
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["status_code"] = self.status_code
        base["retryable"] = self.retryable
        return base


class TransportError(FetchError):
    """No usable response arrived (connection refused, reset, status 0)."""

    default_code = "transport_error"
    retryable = True


class RequestTimeoutError(TransportError):
    """The request exceeded its per-request timeout."""

    default_code = "request_timeout"


class ServerError(FetchError):
    """The endpoint answered with a 5xx status."""

    default_code = "server_error"
    retryable = True


class ClientError(FetchError):
    """The endpoint rejected the request with a 4xx status."""

    default_code = "client_error"


class ValidationError(ClientError):
    """The endpoint rejected the payload (422) with field-level reasons.

    ``errors`` maps field names to the list of reasons reported for it.
    """

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        errors: dict[str, list[str]] | None = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("status_code", 422)
        super().__init__(message, **kwargs)
        self.errors: dict[str, list[str]] = errors or {}

    def describe(self) -> str:
        """One line per failed field: ``field: reason; reason``."""
        if not self.errors:
            return self.message
        return "\n".join(f"{field}: {'; '.join(reasons)}" for field, reasons in self.errors.items())

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.errors
        return base


class ResponseShapeError(FetchError):
    """The payload could not be decoded or unwrapped into rows and a total."""

    default_code = "response_shape_error"


__all__ = [
    "ClientError",
    "FetchError",
    "RequestTimeoutError",
    "ResponseShapeError",
    "ServerError",
    "TransportError",
    "ValidationError",
]
