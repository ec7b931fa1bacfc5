"""Request payload classification."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel

from .exceptions import FetchLayerValidationError
from .headers import JSON_CONTENT_TYPE


class BodyKind(enum.Enum):
    NONE = "none"
    JSON = "json"
    PRESERIALIZED = "preserialized"
    OPAQUE = "opaque"


@dataclass(frozen=True)
class NegotiatedBody:
    kind: BodyKind
    content: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")


def _is_opaque(payload: Any) -> bool:
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return True
    if hasattr(payload, "read"):
        return True
    return callable(getattr(payload, "append", None)) and not isinstance(payload, list)


def classify_body(payload: Any) -> BodyKind:
    if payload is None:
        return BodyKind.NONE
    if isinstance(payload, str):
        return BodyKind.PRESERIALIZED
    if isinstance(payload, BaseModel):
        return BodyKind.JSON
    if _is_opaque(payload):
        return BodyKind.OPAQUE
    if isinstance(payload, (Mapping, list, tuple)):
        return BodyKind.JSON
    return BodyKind.OPAQUE


def _dump_json(payload: Any) -> str:
    if isinstance(payload, BaseModel):
        return payload.model_dump_json()
    try:
        return json.dumps(payload, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise FetchLayerValidationError(f"request body is not JSON serializable: {exc}", cause=exc) from exc


def negotiate_body(payload: Any) -> NegotiatedBody:
    """Decide how ``payload`` travels to the transport.

    Structured values (mappings, lists, tuples, pydantic models) become
    compact JSON text plus a JSON content type. Strings, binary data, file
    objects and multipart handles are forwarded as the very same object with
    no content type, leaving their encoding to the transport or the caller.
    """
    kind = classify_body(payload)
    if kind is BodyKind.JSON:
        return NegotiatedBody(kind, _dump_json(payload), {"content-type": JSON_CONTENT_TYPE})
    return NegotiatedBody(kind, payload)
