"""Tests for HTTP-based adapters."""

import asyncio
import json
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from gym_companion.adapters.api_client import ACCESS_TOKEN_KEY, HttpxApiClient
from gym_companion.adapters.auth0_client import HttpxAuth0Client
from gym_companion.errors import NetworkError
from tests.conftest import RecordingStore, build_api_client


def test_api_client_attaches_stored_bearer_token() -> None:
    seen: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json=[])

    store = RecordingStore(values={ACCESS_TOKEN_KEY: "abc"})
    client = build_api_client(store, handler)

    asyncio.run(client.get("/api/gym/programs"))
    store.values[ACCESS_TOKEN_KEY] = "rotated"
    asyncio.run(client.post("/api/gym/programs", {"program_name": "Push"}))

    assert seen == ["Bearer abc", "Bearer rotated"]


def test_api_client_sends_unauthenticated_without_token() -> None:
    seen: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json={})

    client = build_api_client(RecordingStore(), handler)
    failing_store = RecordingStore(values={ACCESS_TOKEN_KEY: "abc"}, fail_reads=True)
    failing_client = build_api_client(failing_store, handler)

    asyncio.run(client.get("/api/session/history"))
    asyncio.run(failing_client.get("/api/session/history"))

    assert seen == [None, None]


def test_api_client_propagates_http_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "unauthorized"})

    client = build_api_client(RecordingStore(), handler)

    with pytest.raises(httpx.HTTPStatusError) as excinfo:
        asyncio.run(client.delete("/api/gym/programs/1"))

    assert excinfo.value.response.status_code == 401


def test_api_client_sends_json_bodies() -> None:
    seen: list[tuple[str, str, bytes]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.content))
        return httpx.Response(200, json={})

    client = build_api_client(RecordingStore(), handler)

    asyncio.run(client.put("/api/session/log/4", {"completed": True}))
    asyncio.run(client.get("/api/session/4"))

    assert seen[0][0] == "PUT"
    assert json.loads(seen[0][2]) == {"completed": True}
    assert seen[1] == ("GET", "/api/session/4", b"")


def test_api_client_create_uses_base_url() -> None:
    client = HttpxApiClient.create("https://api.test", RecordingStore(), timeout=5)

    assert client.http_client.base_url.host == "api.test"
    asyncio.run(client.close())


def _auth0_client(handler) -> HttpxAuth0Client:  # type: ignore[no-untyped-def]
    return HttpxAuth0Client(
        domain="tenant.auth0.com",
        client_id="client-id",
        audience="https://gym-companion-api",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_auth0_authorize_url_parameters() -> None:
    client = _auth0_client(lambda request: httpx.Response(200))

    url = client.build_authorize_url(
        redirect_uri="myapp://callback",
        nonce="n1",
        state="s1",
        response_mode="fragment",
    )

    parts = urlsplit(url)
    query = {key: values[0] for key, values in parse_qs(parts.query).items()}
    assert parts.netloc == "tenant.auth0.com"
    assert parts.path == "/authorize"
    assert query == {
        "client_id": "client-id",
        "redirect_uri": "myapp://callback",
        "response_type": "token id_token",
        "response_mode": "fragment",
        "scope": "openid profile email",
        "audience": "https://gym-companion-api",
        "nonce": "n1",
        "state": "s1",
    }


def test_auth0_logout_url_encodes_return_target() -> None:
    client = _auth0_client(lambda request: httpx.Response(200))

    url = client.build_logout_url("http://localhost:8081/login")

    assert url == (
        "https://tenant.auth0.com/v2/logout?client_id=client-id"
        "&returnTo=http%3A%2F%2Flocalhost%3A8081%2Flogin"
    )


def test_auth0_userinfo_uses_bearer_access_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/userinfo"
        assert request.headers["Authorization"] == "Bearer access-1"
        return httpx.Response(200, json={"sub": "auth0|abc", "email": "a@b.com"})

    client = _auth0_client(handler)

    profile = asyncio.run(client.get_userinfo("access-1"))

    assert profile == {"sub": "auth0|abc", "email": "a@b.com"}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"error": "invalid_token"}),
        httpx.Response(200, content=b"<html>"),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
def test_auth0_userinfo_failures_raise_network_error(response) -> None:
    client = _auth0_client(lambda request: response)

    with pytest.raises(NetworkError):
        asyncio.run(client.get_userinfo("access-1"))
