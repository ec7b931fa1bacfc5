"""Request entry points: module-level helpers and a client with defaults."""

from __future__ import annotations

import logging
import os
from typing import Any, Coroutine, Mapping, Union

from .assembler import AssembledRequest, assemble_request, resolve_options
from .headers import sanitize_headers
from .merge import merge
from .request_options import RequestOptions, coerce_options
from .response import NormalizedResponse, interpret_response
from .transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

Target = Union[str, RequestOptions, Mapping[str, Any], None]
Options = Union[RequestOptions, Mapping[str, Any], None]
ResponseCoroutine = Coroutine[Any, Any, NormalizedResponse]


async def _dispatch(
    assembled: AssembledRequest,
    options: RequestOptions,
    transport: Transport | None,
) -> NormalizedResponse:
    if transport is None:
        transport = HttpxTransport(single_use=True)
    logger.debug(
        "Dispatching %s %s headers=%s",
        assembled.method,
        assembled.url,
        sanitize_headers(assembled.headers),
    )
    raw = await transport(assembled.url, assembled.to_init())
    return await interpret_response(raw, options)


def request(target: Target, options: Options = None) -> ResponseCoroutine:
    """Send one request and return a coroutine resolving to the response.

    ``target`` is the URL, or an options object carrying ``url``. Options
    are validated and assembled before this function returns, so a missing
    URL raises ``FetchLayerValidationError`` immediately, without touching
    the transport. Awaiting the result raises ``FetchLayerResponseError`` if
    the status is rejected, and lets transport errors through unchanged.
    """
    resolved = resolve_options(target, options)
    assembled = assemble_request(resolved)
    return _dispatch(assembled, resolved, resolved.fetch)


def _with(options: Options, **changes: Any) -> RequestOptions:
    return coerce_options(options).with_overrides(**changes)


def get(url: Target, options: Options = None) -> ResponseCoroutine:
    return request(url, _with(options, method="GET"))


def delete(url: Target, options: Options = None) -> ResponseCoroutine:
    return request(url, _with(options, method="DELETE"))


def head(url: Target, options: Options = None) -> ResponseCoroutine:
    return request(url, _with(options, method="HEAD"))


def options(url: Target, options: Options = None) -> ResponseCoroutine:
    return request(url, _with(options, method="OPTIONS"))


def post(url: Target, data: Any = None, options: Options = None) -> ResponseCoroutine:
    return request(url, _with(options, data=data, method="POST"))


def put(url: Target, data: Any = None, options: Options = None) -> ResponseCoroutine:
    return request(url, _with(options, data=data, method="PUT"))


def patch(url: Target, data: Any = None, options: Options = None) -> ResponseCoroutine:
    return request(url, _with(options, data=data, method="PATCH"))


class FetchLayerClient:
    """Issues requests that share a set of default options.

    Defaults and per-call options are combined with :func:`merge`, per-call
    values winning; header names are folded so a per-call header replaces a
    default one regardless of case. Without an explicit ``fetch`` the client
    owns an :class:`HttpxTransport` until :meth:`aclose`.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        headers: Mapping[str, str] | None = None,
        fetch: Transport | None = None,
        timeout: float = HttpxTransport.default_timeout,
        base_url_env_var: str = "FETCHLAYER_BASE_URL",
        **defaults: Any,
    ) -> None:
        self.base_url = base_url or os.getenv(base_url_env_var) or None
        self._transport = HttpxTransport(timeout=timeout) if fetch is None else None
        self.defaults = RequestOptions.from_mapping(
            {
                **defaults,
                "base_url": self.base_url,
                "headers": headers,
                "fetch": fetch or self._transport,
            }
        )

    async def __aenter__(self) -> "FetchLayerClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._transport is not None:
            await self._transport.aclose()

    def _merge_options(self, target: Target, options: Options) -> tuple[Target, RequestOptions]:
        if isinstance(target, (RequestOptions, Mapping)):
            target, options = None, merge(coerce_options(target).to_mapping(), coerce_options(options).to_mapping())
        merged = merge(self.defaults.to_mapping(), coerce_options(options).to_mapping())
        return target, RequestOptions.from_mapping(merged)

    def request(self, target: Target, options: Options = None) -> ResponseCoroutine:
        target, merged = self._merge_options(target, options)
        return request(target, merged)

    def get(self, url: Target, options: Options = None) -> ResponseCoroutine:
        return self.request(url, _with(options, method="GET"))

    def delete(self, url: Target, options: Options = None) -> ResponseCoroutine:
        return self.request(url, _with(options, method="DELETE"))

    def head(self, url: Target, options: Options = None) -> ResponseCoroutine:
        return self.request(url, _with(options, method="HEAD"))

    def options(self, url: Target, options: Options = None) -> ResponseCoroutine:
        return self.request(url, _with(options, method="OPTIONS"))

    def post(self, url: Target, data: Any = None, options: Options = None) -> ResponseCoroutine:
        return self.request(url, _with(options, data=data, method="POST"))

    def put(self, url: Target, data: Any = None, options: Options = None) -> ResponseCoroutine:
        return self.request(url, _with(options, data=data, method="PUT"))

    def patch(self, url: Target, data: Any = None, options: Options = None) -> ResponseCoroutine:
        return self.request(url, _with(options, data=data, method="PATCH"))
