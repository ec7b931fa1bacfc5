"""Normalization of raw transport responses."""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import FetchLayerValidationError, status_rejected
from .request_options import DEFAULT_RESPONSE_TYPE, RESPONSE_TYPES, RequestOptions

logger = logging.getLogger(__name__)


class NormalizedResponse(BaseModel):
    """Result of one request.

    Any non-callable field of the transport response without a declared
    counterpart here is kept as an extra attribute.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    status: int = 0
    status_text: str = Field("", alias="statusText")
    ok: bool = False
    url: str = ""
    headers: dict[str, Any] = Field(default_factory=dict)
    redirected: bool = False
    type: str | None = None
    body: Any = None
    config: Any = None

    @property
    def data(self) -> Any:
        return self.body


def project_fields(raw: Any) -> dict[str, Any]:
    """Copy the public, non-callable fields of ``raw``."""
    if isinstance(raw, Mapping):
        items = raw.items()
    else:
        items = ((name, getattr(raw, name, None)) for name in dir(raw))
    projected: dict[str, Any] = {}
    for name, value in items:
        if not isinstance(name, str) or name.startswith("_") or callable(value):
            continue
        projected[name] = value
    headers = projected.get("headers")
    if isinstance(headers, Mapping):
        projected["headers"] = dict(headers.items())
    elif headers is None:
        projected.pop("headers", None)
    return projected


def _extractor(raw: Any, name: str) -> Any:
    if isinstance(raw, Mapping):
        extractor = raw.get(name)
    else:
        extractor = getattr(raw, name, None)
    if not callable(extractor):
        raise FetchLayerValidationError(f"transport response cannot produce a {name!r} body")
    return extractor


async def extract_body(raw: Any, response_type: str) -> Any:
    """Read the body in ``response_type`` mode, then try to upgrade it to JSON.

    A parse error while reading leaves the body ``None``. Text that happens
    to be valid JSON is returned decoded whatever the requested mode.
    """
    extractor = _extractor(raw, RESPONSE_TYPES[response_type])
    try:
        result = extractor()
        parsed = await result if inspect.isawaitable(result) else result
    except ValueError as exc:
        logger.debug("Could not read %s body: %s", response_type, exc)
        return None
    if not isinstance(parsed, str):
        return parsed
    try:
        return json.loads(parsed, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return parsed


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON.
    raise ValueError(f"invalid JSON constant: {name}")


async def release_body(raw: Any) -> None:
    """Free an unread streamed body, when the raw response supports it."""
    if isinstance(raw, Mapping):
        closer = raw.get("aclose")
    else:
        closer = getattr(raw, "aclose", None)
    if not callable(closer):
        return
    result = closer()
    if inspect.isawaitable(result):
        await result


def is_success(raw_fields: Mapping[str, Any], options: RequestOptions) -> bool:
    if options.validate_status is not None:
        return bool(options.validate_status(raw_fields.get("status", 0)))
    return bool(raw_fields.get("ok", False))


async def interpret_response(raw: Any, options: RequestOptions) -> NormalizedResponse:
    """Build the normalized response for ``raw``.

    Raises ``FetchLayerResponseError`` carrying the response when its status
    is not accepted.
    """
    fields = project_fields(raw)
    response_type = options.response_type or DEFAULT_RESPONSE_TYPE
    if RESPONSE_TYPES[response_type] is None:
        body = fields.get("body")
    else:
        body = await extract_body(raw, response_type)
    fields["body"] = body
    fields["config"] = options

    response = NormalizedResponse.model_validate(fields)
    if not is_success(fields, options):
        logger.debug("Rejected status %s for %s", response.status, response.url)
        if RESPONSE_TYPES[response_type] is None:
            await release_body(raw)
        raise status_rejected(response)
    return response
