import logging

from .assembler import AssembledRequest, assemble_request, resolve_options
from .body import BodyKind, NegotiatedBody, negotiate_body
from .client import FetchLayerClient, delete, get, head, options, patch, post, put, request
from .exceptions import (
    FetchLayerAbortError,
    FetchLayerError,
    FetchLayerHTTPError,
    FetchLayerResponseError,
    FetchLayerValidationError,
)
from .formdata import FormData
from .headers import compose_headers
from .logger import setup_logging
from .merge import merge
from .request_options import RequestOptions
from .response import NormalizedResponse
from .transport import CancelToken, FetchResponse, HttpxTransport, RawResponse, Transport
from .urls import resolve_url

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AssembledRequest",
    "BodyKind",
    "CancelToken",
    "FetchLayerAbortError",
    "FetchLayerClient",
    "FetchLayerError",
    "FetchLayerHTTPError",
    "FetchLayerResponseError",
    "FetchLayerValidationError",
    "FetchResponse",
    "FormData",
    "HttpxTransport",
    "NegotiatedBody",
    "NormalizedResponse",
    "RawResponse",
    "RequestOptions",
    "Transport",
    "assemble_request",
    "compose_headers",
    "delete",
    "get",
    "head",
    "merge",
    "negotiate_body",
    "options",
    "patch",
    "post",
    "put",
    "request",
    "resolve_options",
    "resolve_url",
    "setup_logging",
]
