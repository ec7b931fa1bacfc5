"""Header composition and redaction helpers."""

from __future__ import annotations

from typing import Any, Mapping

from .merge import merge

JSON_CONTENT_TYPE = "application/json"

SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "x-api-key",
    "x-xsrf-token",
}


def derived_headers(
    *,
    content_type: str | None = None,
    auth: str | None = None,
    csrf: str | None = None,
) -> dict[str, str]:
    """Headers implied by the payload and the auth/csrf options."""
    headers: dict[str, str] = {}
    if content_type:
        headers["content-type"] = content_type
    if csrf:
        headers["x-xsrf-token"] = csrf
    if auth:
        headers["authorization"] = auth
    return headers


def compose_headers(
    derived: Mapping[str, Any] | None,
    user: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Fold ``derived`` and ``user`` headers into one lower-cased mapping.

    User-supplied headers are applied last, so they win over derived ones
    that share a case-insensitive name.
    """
    return merge(derived or {}, user or {}, fold_keys=True)


def sanitize_headers(headers: Mapping[str, Any]) -> dict[str, Any]:
    """Return headers with sensitive values redacted for logging."""
    redacted: dict[str, Any] = {}
    for key, value in headers.items():
        if str(key).lower() in SENSITIVE_HEADERS:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted
