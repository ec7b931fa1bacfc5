"""Per-request options accepted by fetchlayer."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Any, Callable, Mapping

from .exceptions import FetchLayerValidationError

if TYPE_CHECKING:
    from .transport import CancelToken, Transport
    from .urls import Params, ParamsSerializer

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})

DEFAULT_METHOD = "GET"
DEFAULT_RESPONSE_TYPE = "text"

# responseType -> extraction method on the raw response; "stream" reads nothing.
RESPONSE_TYPES = {
    "text": "text",
    "json": "json",
    "stream": None,
    "blob": "blob",
    "array_buffer": "array_buffer",
    "arrayBuffer": "array_buffer",
    "form_data": "form_data",
    "formData": "form_data",
}

_ALIASES = {
    "responseType": "response_type",
    "paramsSerializer": "params_serializer",
    "withCredentials": "with_credentials",
    "validateStatus": "validate_status",
    "baseURL": "base_url",
    "baseUrl": "base_url",
    "body": "data",
}


@dataclass(frozen=True)
class RequestOptions:
    url: str | None = None
    method: str | None = None
    headers: Mapping[str, str] | None = None
    data: Any = None
    params: Params | None = None
    params_serializer: ParamsSerializer | None = None
    base_url: str | None = None
    response_type: str | None = None
    with_credentials: bool | None = None
    auth: str | None = None
    csrf: str | None = None
    validate_status: Callable[[int], bool] | None = None
    fetch: Transport | None = None
    signal: CancelToken | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "RequestOptions":
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise FetchLayerValidationError(f"Unknown request option: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def to_mapping(self) -> dict[str, Any]:
        """Explicitly set fields only, for merging with other options."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def with_overrides(self, **changes: Any) -> "RequestOptions":
        return replace(self, **changes)


def coerce_options(options: RequestOptions | Mapping[str, Any] | None) -> RequestOptions:
    if options is None:
        return RequestOptions()
    if isinstance(options, RequestOptions):
        return options
    if isinstance(options, Mapping):
        return RequestOptions.from_mapping(options)
    raise FetchLayerValidationError(f"options must be RequestOptions or a mapping, got {type(options).__name__}")
