from __future__ import annotations

import asyncio
import inspect

import pytest

import fetchlayer
from conftest import RecordingFetch, StubResponse
from fetchlayer import (
    FetchLayerClient,
    FetchLayerResponseError,
    FetchLayerValidationError,
    FormData,
    RequestOptions,
)


def run(coro):
    return asyncio.run(coro)


def test_get_text_resource(mocked_server) -> None:
    async def scenario():
        return await fetchlayer.request("http://mocked-server/text", {"fetch": mocked_server()})

    response = run(scenario())

    assert response.status == 200
    assert response.status_text == "OK"
    assert response.body == "some example content"


def test_get_json_resource(mocked_server) -> None:
    async def scenario():
        return await fetchlayer.get("http://mocked-server/json", {"fetch": mocked_server()})

    assert run(scenario()).body == {"message": "some example content"}


def test_not_found_raises_with_status(mocked_server) -> None:
    async def scenario():
        return await fetchlayer.request("http://mocked-server/404", {"fetch": mocked_server()})

    with pytest.raises(FetchLayerResponseError) as excinfo:
        run(scenario())

    assert excinfo.value.response.status == 404
    assert excinfo.value.response.body == "Not found"


def test_base_url_resolution_end_to_end(mocked_server) -> None:
    async def scenario():
        return await fetchlayer.get("/bar", {"base_url": "http://foo", "fetch": mocked_server()})

    response = run(scenario())

    assert response.url == "http://foo/bar"
    assert response.status == 200


def test_missing_url_fails_before_any_coroutine_exists(fetch_mock: RecordingFetch) -> None:
    with pytest.raises(FetchLayerValidationError, match="Missing required 'options.url'."):
        fetchlayer.get(None, {"fetch": fetch_mock})

    assert fetch_mock.calls == []


def test_request_returns_awaitable(fetch_mock: RecordingFetch) -> None:
    pending = fetchlayer.request("/", {"fetch": fetch_mock})

    assert inspect.isawaitable(pending)
    assert fetch_mock.calls == []
    assert run(pending).body == "hello"


def test_relative_base_url_and_defaults(fetch_mock: RecordingFetch) -> None:
    run(fetchlayer.get("/bar", {"base_url": "/foo", "fetch": fetch_mock}))

    assert fetch_mock.last_url == "/foo/bar"
    assert fetch_mock.last_init == {
        "method": "GET",
        "headers": {},
        "body": None,
        "credentials": "same-origin",
    }


def test_headers_merge_case_insensitively(fetch_mock: RecordingFetch) -> None:
    run(fetchlayer.request("/", {"headers": {"x-foo": "2"}, "fetch": fetch_mock}))
    assert fetch_mock.last_init["headers"] == {"x-foo": "2"}

    run(fetchlayer.request("/", {"headers": {"x-foo": "2", "X-Foo": "4"}, "fetch": fetch_mock}))
    assert fetch_mock.last_init["headers"] == {"x-foo": "4"}

    run(fetchlayer.request("/", {"headers": {"base-upper": "replaced", "BASE-LOWER": "replaced"}, "fetch": fetch_mock}))
    assert fetch_mock.last_init["headers"] == {"base-upper": "replaced", "base-lower": "replaced"}


def test_user_headers_overwrite_internal_ones(fetch_mock: RecordingFetch) -> None:
    # User-supplied headers win over derived ones on a name collision.
    run(fetchlayer.request("/", {"data": {"some": "data"}, "fetch": fetch_mock}))
    assert fetch_mock.last_init["headers"] == {"content-type": "application/json"}

    run(
        fetchlayer.request(
            "/",
            {
                "data": {"some": "data"},
                "headers": {"content-type": "not-application/json"},
                "fetch": fetch_mock,
            },
        )
    )
    assert fetch_mock.last_init["headers"] == {"content-type": "not-application/json"}


def test_post_serializes_json_body(fetch_mock: RecordingFetch) -> None:
    response = run(fetchlayer.post("http://mocked-server/post-json", {"hello": "world"}, {"fetch": fetch_mock}))

    assert fetch_mock.last_url == "http://mocked-server/post-json"
    assert fetch_mock.last_init["method"] == "POST"
    assert fetch_mock.last_init["headers"] == {"content-type": "application/json"}
    assert fetch_mock.last_init["body"] == '{"hello":"world"}'
    assert response.body == "hello"


def test_post_form_data_keeps_handle_and_user_content_type(fetch_mock: RecordingFetch) -> None:
    form = FormData()
    form.append("hello", "world")

    run(fetchlayer.post("http://mocked-server/post-formdata", form, {"fetch": fetch_mock}))
    assert fetch_mock.last_init["body"] is form
    assert fetch_mock.last_init["headers"] == {}

    run(
        fetchlayer.post(
            "http://mocked-server/post-formdata",
            form,
            {"headers": {"content-type": "multipart/form-data"}, "fetch": fetch_mock},
        )
    )
    assert fetch_mock.last_init["headers"] == {"content-type": "multipart/form-data"}
    assert fetch_mock.last_init["body"] is form


@pytest.mark.parametrize(
    "url, params, serializer, expected",
    [
        ("http://mocked-server/foo", None, None, "http://mocked-server/foo"),
        ("http://mocked-server/foo", {"a": 1, "b": True}, None, "http://mocked-server/foo?a=1&b=true"),
        ("http://mocked-server/foo?c=42", {"a": 1, "b": True}, None, "http://mocked-server/foo?c=42&a=1&b=true"),
        ("http://mocked-server/foo", {"a": 1}, lambda params: "e=iserializehere", "http://mocked-server/foo?e=iserializehere"),
    ],
)
def test_params_serialization(fetch_mock: RecordingFetch, url, params, serializer, expected) -> None:
    run(fetchlayer.get(url, RequestOptions(params=params, params_serializer=serializer, fetch=fetch_mock)))

    assert fetch_mock.last_url == expected


@pytest.mark.parametrize(
    "verb, method",
    [
        (fetchlayer.get, "GET"),
        (fetchlayer.delete, "DELETE"),
        (fetchlayer.head, "HEAD"),
        (fetchlayer.options, "OPTIONS"),
    ],
)
def test_bodyless_verbs_set_method(fetch_mock: RecordingFetch, verb, method) -> None:
    run(verb("/x", {"method": "post", "fetch": fetch_mock}))

    assert fetch_mock.last_init["method"] == method


@pytest.mark.parametrize(
    "verb, method",
    [(fetchlayer.post, "POST"), (fetchlayer.put, "PUT"), (fetchlayer.patch, "PATCH")],
)
def test_body_verbs_take_payload_before_options(fetch_mock: RecordingFetch, verb, method) -> None:
    run(verb("/x", [1, 2], {"fetch": fetch_mock}))

    assert fetch_mock.last_init["method"] == method
    assert fetch_mock.last_init["body"] == "[1,2]"


def test_lowercase_method_is_uppercased(fetch_mock: RecordingFetch) -> None:
    run(fetchlayer.request({"url": "/x", "method": "delete", "fetch": fetch_mock}))

    assert fetch_mock.last_init["method"] == "DELETE"


def test_auth_csrf_and_credentials(fetch_mock: RecordingFetch) -> None:
    run(
        fetchlayer.get(
            "/x",
            {"auth": "Bearer abc", "csrf": "tok", "withCredentials": True, "fetch": fetch_mock},
        )
    )

    assert fetch_mock.last_init["headers"] == {"authorization": "Bearer abc", "x-xsrf-token": "tok"}
    assert fetch_mock.last_init["credentials"] == "include"


def test_transport_errors_propagate_unchanged() -> None:
    class Boom(Exception):
        pass

    async def failing_fetch(url, init):
        raise Boom("connection refused")

    with pytest.raises(Boom, match="connection refused"):
        run(fetchlayer.get("/x", {"fetch": failing_fetch}))


def test_client_merges_defaults_with_call_options() -> None:
    fetch = RecordingFetch(StubResponse('{"ok": true}'))

    async def scenario():
        async with FetchLayerClient(
            base_url="http://api",
            headers={"Authorization": "Bearer default", "X-App": "demo"},
            fetch=fetch,
            params={"v": 1},
        ) as client:
            return await client.get("/items", {"headers": {"authorization": "Bearer call"}})

    response = run(scenario())

    assert fetch.last_url == "http://api/items?v=1"
    assert fetch.last_init["headers"] == {"authorization": "Bearer call", "x-app": "demo"}
    assert response.body == {"ok": True}


def test_client_reads_base_url_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("FETCHLAYER_BASE_URL", "http://from-env")
    fetch = RecordingFetch()

    client = FetchLayerClient(fetch=fetch)
    run(client.post("/things", {"a": 1}))

    assert client.base_url == "http://from-env"
    assert fetch.last_url == "http://from-env/things"
    assert fetch.last_init["body"] == '{"a":1}'


def test_client_requires_url(fetch_mock: RecordingFetch) -> None:
    client = FetchLayerClient(fetch=fetch_mock)

    with pytest.raises(FetchLayerValidationError):
        client.request({"method": "get"})
