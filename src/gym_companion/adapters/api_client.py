"""Gym Companion REST API client with bearer token injection."""

import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Protocol

import httpx

from gym_companion.adapters.storage import KeyValueStore
from gym_companion.errors import StorageError

ACCESS_TOKEN_KEY = "auth0_access_token"

_logger = logging.getLogger(__name__)


class ApiClient(Protocol):
    """Interface for authenticated calls to the Gym Companion API."""

    async def get(self, path: str) -> httpx.Response:
        """Send a GET request."""

    async def post(self, path: str, body: object | None = None) -> httpx.Response:
        """Send a POST request with an optional JSON body."""

    async def put(self, path: str, body: object | None = None) -> httpx.Response:
        """Send a PUT request with an optional JSON body."""

    async def delete(self, path: str) -> httpx.Response:
        """Send a DELETE request."""


class StoredTokenAuth(httpx.Auth):
    """Attach the stored access token as a bearer credential."""

    def __init__(self, store: KeyValueStore, key: str = ACCESS_TOKEN_KEY) -> None:
        self.store = store
        self.key = key

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        try:
            token = await self.store.get(self.key)
        except StorageError:
            _logger.warning("Access token read failed; sending request unauthenticated")
            token = None
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


@dataclass
class HttpxApiClient(ApiClient):
    """API client implemented with httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, base_url: str, store: KeyValueStore, timeout: float = 10.0
    ) -> "HttpxApiClient":
        """Create an API client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(
                base_url=base_url,
                auth=StoredTokenAuth(store),
                timeout=timeout,
            )
        )

    async def get(self, path: str) -> httpx.Response:
        """Send a GET request."""
        return await self._send("GET", path)

    async def post(self, path: str, body: object | None = None) -> httpx.Response:
        """Send a POST request."""
        return await self._send("POST", path, body)

    async def put(self, path: str, body: object | None = None) -> httpx.Response:
        """Send a PUT request."""
        return await self._send("PUT", path, body)

    async def delete(self, path: str) -> httpx.Response:
        """Send a DELETE request."""
        return await self._send("DELETE", path)

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _send(
        self, method: str, path: str, body: object | None = None
    ) -> httpx.Response:
        response = await self.http_client.request(method, path, json=body)
        response.raise_for_status()
        return response
