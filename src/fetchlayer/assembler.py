"""Turns request options into a single transport call descriptor."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from .body import BodyKind, negotiate_body
from .exceptions import FetchLayerValidationError, missing_url_error
from .headers import compose_headers, derived_headers
from .merge import merge
from .request_options import (
    DEFAULT_METHOD,
    DEFAULT_RESPONSE_TYPE,
    HTTP_METHODS,
    RESPONSE_TYPES,
    RequestOptions,
    coerce_options,
)
from .urls import resolve_url

CREDENTIALS_INCLUDE = "include"
CREDENTIALS_SAME_ORIGIN = "same-origin"


@dataclass(frozen=True)
class AssembledRequest:
    url: str
    method: str
    headers: Mapping[str, Any]
    body: Any = None
    body_kind: BodyKind = BodyKind.NONE
    credentials: str = CREDENTIALS_SAME_ORIGIN
    signal: Any = None

    def to_init(self) -> dict[str, Any]:
        init: dict[str, Any] = {
            "method": self.method,
            "headers": dict(self.headers),
            "body": self.body,
            "credentials": self.credentials,
        }
        if self.signal is not None:
            init["signal"] = self.signal
        return init


def _is_url(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def resolve_options(
    target: str | RequestOptions | Mapping[str, Any] | None,
    options: RequestOptions | Mapping[str, Any] | None = None,
) -> RequestOptions:
    """Combine the call's target and options, enforcing a usable URL.

    The target may be the URL itself, or an options object standing in for
    both arguments. Raises ``FetchLayerValidationError`` when no non-empty URL
    string can be found.
    """
    if _is_url(target):
        return coerce_options(options).with_overrides(url=target)

    if isinstance(target, (RequestOptions, Mapping)):
        resolved = RequestOptions.from_mapping(
            merge(coerce_options(target).to_mapping(), coerce_options(options).to_mapping())
        )
    else:
        resolved = coerce_options(options)
    if not _is_url(resolved.url):
        raise missing_url_error()
    return resolved


def normalize_method(method: str | None) -> str:
    if method is None:
        return DEFAULT_METHOD
    if not isinstance(method, str) or method.upper() not in HTTP_METHODS:
        raise FetchLayerValidationError(f"Unsupported HTTP method: {method!r}")
    return method.upper()


def normalize_response_type(response_type: str | None) -> str:
    if response_type is None:
        return DEFAULT_RESPONSE_TYPE
    if response_type not in RESPONSE_TYPES:
        raise FetchLayerValidationError(f"Unsupported responseType: {response_type!r}")
    return response_type


def assemble_request(options: RequestOptions) -> AssembledRequest:
    if not _is_url(options.url):
        raise missing_url_error()
    normalize_response_type(options.response_type)

    negotiated = negotiate_body(options.data)
    headers = compose_headers(
        derived_headers(
            content_type=negotiated.content_type,
            auth=options.auth,
            csrf=options.csrf,
        ),
        options.headers,
    )
    url = resolve_url(
        options.url,
        base_url=options.base_url,
        params=options.params,
        serializer=options.params_serializer,
    )
    return AssembledRequest(
        url=url,
        method=normalize_method(options.method),
        headers=MappingProxyType(headers),
        body=negotiated.content,
        body_kind=negotiated.kind,
        credentials=CREDENTIALS_INCLUDE if options.with_credentials else CREDENTIALS_SAME_ORIGIN,
        signal=options.signal,
    )
