"""Fetch – TableHttpClient, an httpx wrapper with structured error mapping."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import httpx

from mp_datatable.kernel.errors import (
    ClientError,
    FetchError,
    RequestTimeoutError,
    ResponseShapeError,
    ServerError,
    TransportError,
    ValidationError,
)

QueryParams = Mapping[str, Any] | Sequence[tuple[str, str]]


class TableHttpClient:
    """Thin async httpx wrapper that raises :class:`FetchError` subclasses.

    * timeouts → :class:`RequestTimeoutError`
    * no response → :class:`TransportError`
    * 5xx → :class:`ServerError`
    * 422 → :class:`ValidationError`
    * other 4xx → :class:`ClientError`
    """

    def __init__(self, base_url: str = "", timeout: float = 15.0, **kwargs: Any) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, **kwargs)

    async def __aenter__(self) -> "TableHttpClient":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._client.__aexit__(*args)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, url: str, params: QueryParams | None = None) -> Any:
        response = await self._request("GET", url, params=params)
        return _decode(response, url)

    async def post_json(self, url: str, payload: Any) -> Any:
        response = await self._request("POST", url, json=payload)
        if not response.content:
            return None
        return _decode(response, url)

    async def download(self, url: str, destination: Path, params: QueryParams | None = None) -> Path:
        """Stream a GET response body into *destination*.

        The body lands in a ``.part`` sibling first and replaces *destination*
        only once the transfer completes, so a failed download leaves any
        existing file untouched.
        """
        partial = destination.with_name(f"{destination.name}.part")
        try:
            async with self._client.stream("GET", url, params=params) as response:
                if response.is_error:
                    await response.aread()
                    raise _status_error(response, "GET", url)
                with partial.open("wb") as fh:
                    async for chunk in response.aiter_bytes():
                        fh.write(chunk)
            partial.replace(destination)
        except httpx.HTTPError as exc:
            raise _transport_error(exc, "GET", url) from exc
        finally:
            partial.unlink(missing_ok=True)
        return destination

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise _transport_error(exc, method, url) from exc
        if response.is_error:
            raise _status_error(response, method, url)
        return response


def _decode(response: httpx.Response, url: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ResponseShapeError(
            f"Response from {url} is not valid JSON", url=url, status_code=response.status_code, cause=exc
        ) from exc


def _transport_error(exc: httpx.HTTPError, method: str, url: str) -> FetchError:
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeoutError(f"Request timed out: {method} {url}", url=url, status_code=0, cause=exc)
    return TransportError(str(exc) or f"Network error: {method} {url}", url=url, status_code=0, cause=exc)


def _status_error(response: httpx.Response, method: str, url: str) -> FetchError:
    status = response.status_code
    body = _json_or_none(response)
    message = f"HTTP {status} from {method} {url}"
    if isinstance(body, Mapping) and isinstance(body.get("message"), str) and body["message"]:
        message = body["message"]

    if status >= 500:
        return ServerError(message, url=url, status_code=status)
    if status == 422:
        errors = body.get("errors") if isinstance(body, Mapping) else None
        return ValidationError(message, url=url, errors=_normalise_errors(errors))
    return ClientError(message, url=url, status_code=status)


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _normalise_errors(errors: Any) -> dict[str, list[str]]:
    if not isinstance(errors, Mapping):
        return {}
    normalised: dict[str, list[str]] = {}
    for field, reasons in errors.items():
        if isinstance(reasons, str):
            normalised[str(field)] = [reasons]
        elif isinstance(reasons, Sequence):
            normalised[str(field)] = [str(reason) for reason in reasons]
        else:
            normalised[str(field)] = [str(reasons)]
    return normalised


__all__ = ["QueryParams", "TableHttpClient"]
