"""Failure kinds raised by fetchlayer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from .response import NormalizedResponse


MISSING_URL_MESSAGE = "Missing required 'options.url'."


class FetchLayerError(Exception):
    """Base exception for all fetchlayer failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.headers = dict(headers) if headers is not None else {}
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.status_code is None:
            return str(self.args[0])
        return f"{self.status_code}: {self.args[0]}"


class FetchLayerValidationError(FetchLayerError, TypeError):
    """Raised before dispatch when the request description is unusable."""


class FetchLayerHTTPError(FetchLayerError):
    """Raised for responses whose status was not accepted."""


class FetchLayerResponseError(FetchLayerHTTPError):
    """Carries the full normalized response of a rejected status."""

    def __init__(self, message: str, response: NormalizedResponse) -> None:
        super().__init__(
            message,
            status_code=response.status,
            body=response.body,
            headers=response.headers,
        )
        self.response = response


class FetchLayerAbortError(FetchLayerError):
    """Raised when a request is cancelled through its cancel token."""


def missing_url_error() -> FetchLayerValidationError:
    return FetchLayerValidationError(MISSING_URL_MESSAGE)


def status_rejected(response: NormalizedResponse) -> FetchLayerResponseError:
    return FetchLayerResponseError("Bad fetch response", response)
