from __future__ import annotations

import asyncio
import json
from typing import Any, Mapping

import httpx
import pytest

from fetchlayer import HttpxTransport


class StubResponse:
    """Minimal fetch-shaped response for driving the pipeline without HTTP."""

    def __init__(
        self,
        text: str = "",
        *,
        status: int = 200,
        ok: bool | None = None,
        url: str = "",
        headers: Mapping[str, str] | None = None,
        **extra: Any,
    ) -> None:
        self.status = status
        self.ok = 200 <= status < 300 if ok is None else ok
        self.url = url
        self.headers = dict(headers or {})
        self.body = iter([text.encode()])
        self._text = text
        for key, value in extra.items():
            setattr(self, key, value)

    async def text(self) -> str:
        return self._text

    async def json(self) -> Any:
        return json.loads(self._text)

    async def blob(self) -> bytes:
        return self._text.encode()

    async def array_buffer(self) -> bytes:
        return self._text.encode()


class RecordingFetch:
    def __init__(self, response: Any = None) -> None:
        self.response = response if response is not None else StubResponse("hello")
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def __call__(self, url: str, init: Mapping[str, Any]) -> Any:
        self.calls.append((url, dict(init)))
        return self.response

    @property
    def last_url(self) -> str:
        return self.calls[-1][0]

    @property
    def last_init(self) -> dict[str, Any]:
        return self.calls[-1][1]


@pytest.fixture
def fetch_mock() -> RecordingFetch:
    return RecordingFetch()


async def _mocked_server(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if request.url.host == "foo" and path == "/bar":
        return httpx.Response(200, text="some example content")
    if path == "/text":
        return httpx.Response(200, text="some example content")
    if path == "/json" and request.method == "GET":
        return httpx.Response(200, json={"message": "some example content"})
    if path == "/json" and request.method == "POST":
        return httpx.Response(200, json={"message": json.loads(request.content)})
    if path == "/404":
        return httpx.Response(404, text="Not found", headers={"Content-Type": "text/plain"})
    if path == "/form":
        return httpx.Response(
            200,
            text="a=1&b=two&a=3",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    if path == "/echo":
        return httpx.Response(
            200,
            json={
                "method": request.method,
                "headers": dict(request.headers),
                "body": request.content.decode("latin-1"),
            },
        )
    if path == "/slow":
        await asyncio.sleep(5)
        return httpx.Response(200, text="too late")
    return httpx.Response(404)


@pytest.fixture
def mocked_server():
    """Build an HttpxTransport bound to the in-memory mocked server."""

    def build() -> HttpxTransport:
        client = httpx.AsyncClient(transport=httpx.MockTransport(_mocked_server))
        return HttpxTransport(client)

    return build
