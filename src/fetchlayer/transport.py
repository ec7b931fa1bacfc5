"""Transport protocol and the default httpx-backed transport."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, Protocol

import httpx

from .exceptions import FetchLayerAbortError
from .formdata import FormData

logger = logging.getLogger(__name__)


class RawResponse(Protocol):
    """Fetch-shaped response returned by a transport.

    Extraction methods (``text``, ``json``, ``blob``, ``array_buffer``,
    ``form_data``) may be plain or async callables.
    """

    status: int
    ok: bool
    url: str
    headers: Mapping[str, str]


Transport = Callable[[str, Mapping[str, Any]], Awaitable[RawResponse]]


class CancelToken:
    """Cancellation handle passed to the transport as ``signal``."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    def abort(self, reason: str | None = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_aborted(self) -> None:
        if self.aborted:
            raise FetchLayerAbortError(self.reason or "The request was aborted")


class ResponseStream:
    """Unread response body, iterated as bytes chunks.

    The connection is released once iteration ends, or on :meth:`aclose`
    when the body is abandoned.
    """

    def __init__(self, response: httpx.Response, release: Callable[[], Awaitable[None]]) -> None:
        self._response = response
        self._release = release

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                yield chunk
        finally:
            await self._release()

    async def aclose(self) -> None:
        await self._release()


class FetchResponse:
    """Fetch-style view of an ``httpx.Response`` opened in streaming mode."""

    def __init__(
        self,
        response: httpx.Response,
        on_release: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._response = response
        self._on_release = on_release
        self.status = response.status_code
        self.status_text = response.reason_phrase
        self.ok = response.is_success
        self.url = str(response.url)
        self.headers = dict(response.headers)
        self.redirected = bool(response.history)
        self.type = "default"
        self.body = ResponseStream(response, self._release)

    async def aclose(self) -> None:
        """Release the connection without reading the body."""
        await self._release()

    async def _release(self) -> None:
        await self._response.aclose()
        if self._on_release is not None:
            on_release, self._on_release = self._on_release, None
            await on_release()

    async def _read(self) -> bytes:
        try:
            return await self._response.aread()
        finally:
            await self._release()

    async def text(self) -> str:
        await self._read()
        return self._response.text

    async def json(self) -> Any:
        await self._read()
        return self._response.json()

    async def blob(self) -> bytes:
        return await self._read()

    async def array_buffer(self) -> bytes:
        return await self._read()

    async def form_data(self) -> FormData:
        text = await self.text()
        content_type = self.headers.get("content-type", "")
        if "application/x-www-form-urlencoded" not in content_type.lower():
            raise ValueError(f"cannot decode {content_type or 'untyped'} body as form data")
        form = FormData()
        for name, value in httpx.QueryParams(text).multi_items():
            form.append(name, value)
        return form


class HttpxTransport:
    """Default transport: sends requests through an ``httpx.AsyncClient``.

    ``single_use`` transports close their client as soon as the response body
    has been consumed; the module-level request helpers build one per call.
    Credentials modes are accepted but not enforced: the client's cookie jar
    already scopes cookies to their domain.
    """

    default_timeout = 30.0

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = default_timeout,
        follow_redirects: bool = True,
        single_use: bool = False,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=follow_redirects,
            trust_env=False,
        )
        self._single_use = single_use

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __call__(self, url: str, init: Mapping[str, Any]) -> FetchResponse:
        request = self._build_request(url, init)
        try:
            response = await self._send(request, init.get("signal"))
        except BaseException:
            if self._single_use:
                await self.aclose()
            raise
        on_release = self.aclose if self._single_use else None
        return FetchResponse(response, on_release=on_release)

    def _build_request(self, url: str, init: Mapping[str, Any]) -> httpx.Request:
        headers = {str(k): str(v) for k, v in (init.get("headers") or {}).items()}
        body = init.get("body")
        kwargs: dict[str, Any] = {}
        if isinstance(body, FormData):
            kwargs.update(body.to_httpx())
            # A bare multipart content type carries no boundary; let httpx set it.
            if headers.get("content-type", "").strip().lower() == "multipart/form-data":
                headers.pop("content-type")
        elif isinstance(body, (str, bytes)):
            kwargs["content"] = body
        elif isinstance(body, (bytearray, memoryview)):
            kwargs["content"] = bytes(body)
        elif hasattr(body, "read"):
            kwargs["content"] = body.read()
        elif body is not None:
            kwargs["content"] = str(body)
        return self._client.build_request(
            init.get("method", "GET"),
            url,
            headers=headers,
            **kwargs,
        )

    async def _send(self, request: httpx.Request, signal: CancelToken | None) -> httpx.Response:
        if signal is None:
            return await self._client.send(request, stream=True)

        signal.raise_if_aborted()
        send_task = asyncio.ensure_future(self._client.send(request, stream=True))
        abort_task = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait({send_task, abort_task}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            send_task.cancel()
            raise
        finally:
            abort_task.cancel()
        if send_task.done():
            return send_task.result()

        logger.debug("Aborting %s %s", request.method, request.url)
        send_task.cancel()
        await asyncio.gather(send_task, return_exceptions=True)
        raise FetchLayerAbortError(signal.reason or "The request was aborted")
