"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from cryptography.fernet import Fernet

from gym_companion.adapters.api_client import HttpxApiClient, StoredTokenAuth
from gym_companion.adapters.auth0_client import IdentityProvider
from gym_companion.adapters.platform_redirect import (
    BrowserLauncher,
    CallbackBroker,
    PlatformRedirect,
)
from gym_companion.adapters.storage import InMemoryKeyValueStore, KeyValueStore
from gym_companion.config import Settings
from gym_companion.domain.auth import AuthorizationResult, AuthorizationSuccess
from gym_companion.errors import StorageError
from gym_companion.services.auth import AuthController
from gym_companion.services.credentials import CredentialStore

API_BASE_URL = "https://api.test"
USER_JSON = '{"user_id": 1, "email": "a@b.com"}'

Handler = Callable[[httpx.Request], httpx.Response]


@dataclass
class RecordingStore(InMemoryKeyValueStore):
    """In-memory store that records calls and can fail on demand."""

    saves: list[str] = field(default_factory=list)
    deletes: list[str] = field(default_factory=list)
    fail_saves: set[str] = field(default_factory=set)
    fail_deletes: set[str] = field(default_factory=set)
    fail_reads: bool = False

    async def save(self, key: str, value: str) -> None:
        self.saves.append(key)
        if key in self.fail_saves:
            raise StorageError(f"save failed for {key}")
        await super().save(key, value)

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageError(f"read failed for {key}")
        return await super().get(key)

    async def delete(self, key: str) -> None:
        self.deletes.append(key)
        if key in self.fail_deletes:
            raise StorageError(f"delete failed for {key}")
        await super().delete(key)


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider returning a fixed profile."""

    profile: dict[str, object] = field(
        default_factory=lambda: {"sub": "auth0|abc", "email": "a@b.com"}
    )
    userinfo_error: Exception | None = None
    authorize_requests: list[dict[str, str]] = field(default_factory=list)
    userinfo_tokens: list[str] = field(default_factory=list)

    def build_authorize_url(
        self, *, redirect_uri: str, nonce: str, state: str, response_mode: str
    ) -> str:
        self.authorize_requests.append(
            {
                "redirect_uri": redirect_uri,
                "nonce": nonce,
                "state": state,
                "response_mode": response_mode,
            }
        )
        return f"https://tenant.test/authorize?state={state}"

    async def get_userinfo(self, access_token: str) -> dict[str, object]:
        self.userinfo_tokens.append(access_token)
        if self.userinfo_error is not None:
            raise self.userinfo_error
        return self.profile

    def build_logout_url(self, return_to: str) -> str:
        return f"https://tenant.test/v2/logout?returnTo={return_to}"


@dataclass
class FakePlatformRedirect(PlatformRedirect):
    """Platform redirect with a scripted hosted flow result."""

    result: AuthorizationResult = field(
        default_factory=lambda: AuthorizationSuccess(
            access_token="access-1", id_token="id-1"
        )
    )
    release: asyncio.Event | None = None
    end_session_error: Exception | None = None
    prompts: list[str] = field(default_factory=list)
    logouts: list[str] = field(default_factory=list)
    response_mode: str = "fragment"

    def redirect_uri(self) -> str:
        return "myapp://callback"

    def post_logout_uri(self) -> str:
        return "myapp://login"

    async def authorize(self, authorize_url: str, state: str) -> AuthorizationResult:
        self.prompts.append(authorize_url)
        if self.release is not None:
            await self.release.wait()
        return self.result

    async def end_session(self, logout_url: str) -> None:
        self.logouts.append(logout_url)
        if self.end_session_error is not None:
            raise self.end_session_error


@dataclass
class DeepLinkLauncher(BrowserLauncher):
    """Launcher that answers hosted pages with a scripted deep link."""

    broker: CallbackBroker | None = None
    reply: Callable[[str], str | None] | None = None
    accept: bool = True
    opened: list[str] = field(default_factory=list)

    async def open(self, url: str) -> bool:
        self.opened.append(url)
        if self.accept and self.broker is not None and self.reply is not None:
            link = self.reply(url)
            if link is None:
                self.broker.cancel()
            else:
                self.broker.complete_from_url(link)
        return self.accept


def login_reply(url: str) -> str | None:
    """Answer an authorize page with tokens, or a logout page with the return."""
    query = parse_qs(urlsplit(url).query)
    if "/v2/logout" in url:
        return "myapp://login"
    state = query["state"][0]
    return f"myapp://callback#access_token=access-1&id_token=id-1&state={state}"


@dataclass
class RecordingNavigator:
    """Navigator that records route replacements."""

    routes: list[str] = field(default_factory=list)

    def replace(self, route: str) -> None:
        self.routes.append(route)


def build_api_client(store: KeyValueStore, handler: Handler) -> HttpxApiClient:
    """Create an API client backed by a mock transport."""
    return HttpxApiClient(
        http_client=httpx.AsyncClient(
            base_url=API_BASE_URL,
            transport=httpx.MockTransport(handler),
            auth=StoredTokenAuth(store),
        )
    )


def register_handler(request: httpx.Request) -> httpx.Response:
    """Backend stub answering user registration."""
    assert request.url.path == "/auth/register-auth0-user"
    return httpx.Response(200, json={"user": {"user_id": 1, "email": "a@b.com"}})


def build_controller(
    store: KeyValueStore | None = None,
    provider: FakeIdentityProvider | None = None,
    platform: FakePlatformRedirect | None = None,
    handler: Handler = register_handler,
) -> AuthController:
    """Create an auth controller wired to fakes."""
    resolved_store = store if store is not None else RecordingStore()
    return AuthController(
        credentials=CredentialStore(resolved_store),
        provider=provider or FakeIdentityProvider(),
        platform=platform or FakePlatformRedirect(),
        api_client=build_api_client(resolved_store, handler),
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        auth0_client_id="client-id",
        auth0_domain="tenant.auth0.com",
        api_base_url=API_BASE_URL,
        platform="native",
        storage_path=str(tmp_path / "credentials.db"),
        storage_encryption_key=Fernet.generate_key().decode(),
        redirect_debounce_seconds=0,
        authorization_timeout_seconds=1,
    )


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()
