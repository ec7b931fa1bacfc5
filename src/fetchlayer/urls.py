"""Base URL application and query string composition."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence, Union

import httpx

Params = Union[Mapping[str, Any], Sequence[tuple[str, Any]], str, httpx.QueryParams]
ParamsSerializer = Callable[[Any], str]


def apply_base_url(url: str, base_url: str | None) -> str:
    """Prefix ``url`` with ``base_url`` unless it already names a host.

    A URL containing ``//`` anywhere is left alone. Otherwise one leading
    slash is dropped and the two parts are joined with a single ``/``.
    """
    if not base_url or "//" in url:
        return url
    return f"{base_url}/{url[1:] if url.startswith('/') else url}"


def serialize_params(params: Params, serializer: ParamsSerializer | None = None) -> str:
    """Encode ``params`` as a query string.

    ``serializer`` takes precedence when given. Strings are treated as
    already-encoded query strings; everything else is form-encoded in
    insertion order, with booleans rendered as ``true``/``false``.
    """
    if serializer is not None:
        return str(serializer(params))
    if isinstance(params, str):
        return params[1:] if params.startswith("?") else params
    return str(httpx.QueryParams(params))


def append_query(url: str, query: str) -> str:
    divider = "&" if "?" in url else "?"
    return f"{url}{divider}{query}"


def resolve_url(
    url: str,
    *,
    base_url: str | None = None,
    params: Params | None = None,
    serializer: ParamsSerializer | None = None,
) -> str:
    url = apply_base_url(url, base_url)
    if params:
        url = append_query(url, serialize_params(params, serializer))
    return url
