"""Platform-specific hosted flow redirects.

Login and logout both leave the app for the identity provider's hosted pages
and come back through a redirect. ``WebRedirect`` navigates the page and
receives the redirect on the callback receiver served at the app origin.
``NativeBrowserSession`` opens a transient browser session and receives the
redirect through the app's custom URL scheme. Either way the redirect is
delivered to a ``CallbackBroker``, which resolves the awaiting flow.
"""

import asyncio
import logging
import webbrowser
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar, Protocol
from urllib.parse import parse_qsl, urlsplit

from gym_companion.config import PLATFORM_WEB, Settings, parse_platform
from gym_companion.domain.auth import (
    AuthorizationCancelled,
    AuthorizationFailed,
    AuthorizationResult,
    AuthorizationSuccess,
)

LOGOUT_KEY = "logout"
CALLBACK_PATH = "callback"
LOGIN_PATH = "login"
_CANCEL_ERRORS = frozenset({"access_denied"})

_logger = logging.getLogger(__name__)


class BrowserLauncher(Protocol):
    """Opens hosted provider pages."""

    async def open(self, url: str) -> bool:
        """Open a URL and return whether the browser accepted it."""


@dataclass
class SystemBrowserLauncher(BrowserLauncher):
    """Launcher backed by the system web browser."""

    async def open(self, url: str) -> bool:
        """Open a URL in the default browser."""
        return await asyncio.to_thread(webbrowser.open, url)


@dataclass
class CallbackBroker:
    """Registry of hosted flows waiting for their redirect."""

    _pending: dict[str, asyncio.Future] = field(default_factory=dict)

    def expect(self, key: str) -> asyncio.Future:
        """Register a pending flow and return the future it resolves."""
        previous = self._pending.pop(key, None)
        if previous is not None:
            _resolve(previous, None)
        future = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        return future

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def discard(self, key: str) -> None:
        """Forget a pending flow without resolving it."""
        future = self._pending.pop(key, None)
        if future is not None and not future.done():
            future.cancel()

    def complete(self, key: str, params: Mapping[str, str]) -> bool:
        """Resolve a pending flow with redirect parameters."""
        future = self._pending.pop(key, None)
        if future is None:
            return False
        _resolve(future, dict(params))
        return True

    def cancel(self, key: str | None = None) -> bool:
        """Resolve one pending flow, or all of them, as cancelled."""
        keys = [key] if key is not None else list(self._pending)
        cancelled = False
        for pending_key in keys:
            future = self._pending.pop(pending_key, None)
            if future is not None:
                _resolve(future, None)
                cancelled = True
        return cancelled

    def complete_from_url(self, url: str) -> bool:
        """Resolve a flow from a deep link such as ``myapp://callback#...``."""
        parts = urlsplit(url)
        params = dict(parse_qsl(parts.query))
        params.update(parse_qsl(parts.fragment))
        target = (parts.path.strip("/") or parts.netloc).rsplit("/", 1)[-1]
        if target == LOGIN_PATH:
            return self.complete(LOGOUT_KEY, params)
        if target == CALLBACK_PATH and params.get("state"):
            return self.complete(params["state"], params)
        _logger.warning("Ignoring redirect to unknown target %s", target)
        return False


def _resolve(future: asyncio.Future, value: dict[str, str] | None) -> None:
    """Resolve a future from any thread."""

    def _set() -> None:
        if not future.done():
            future.set_result(value)

    loop = future.get_loop()
    if loop.is_closed():
        return
    loop.call_soon_threadsafe(_set)


def parse_authorization_response(
    params: Mapping[str, str] | None, expected_state: str
) -> AuthorizationResult:
    """Turn redirect parameters into a tagged authorization result."""
    if params is None:
        return AuthorizationCancelled()
    error = params.get("error")
    if error in _CANCEL_ERRORS:
        return AuthorizationCancelled()
    if error:
        return AuthorizationFailed(params.get("error_description") or error)
    if params.get("state") != expected_state:
        return AuthorizationFailed("state mismatch")
    access_token = params.get("access_token")
    if not access_token:
        return AuthorizationFailed("missing access token")
    return AuthorizationSuccess(
        access_token=access_token, id_token=params.get("id_token") or None
    )


class PlatformRedirect(Protocol):
    """Platform capability for hosted login and logout flows."""

    response_mode: str

    def redirect_uri(self) -> str:
        """Return the URI the provider redirects to after login."""

    def post_logout_uri(self) -> str:
        """Return the URI the provider redirects to after logout."""

    async def authorize(self, authorize_url: str, state: str) -> AuthorizationResult:
        """Run the hosted authorization flow."""

    async def end_session(self, logout_url: str) -> None:
        """Run the hosted logout flow."""


async def _await_redirect(
    launcher: BrowserLauncher,
    broker: CallbackBroker,
    key: str,
    url: str,
    timeout: float,
) -> dict[str, str] | None:
    future = broker.expect(key)
    try:
        if not await launcher.open(url):
            raise RuntimeError("Browser refused to open the hosted page")
        return await asyncio.wait_for(future, timeout)
    finally:
        broker.discard(key)


async def _authorize(
    launcher: BrowserLauncher,
    broker: CallbackBroker,
    authorize_url: str,
    state: str,
    timeout: float,
) -> AuthorizationResult:
    try:
        params = await _await_redirect(launcher, broker, state, authorize_url, timeout)
    except TimeoutError:
        return AuthorizationFailed("authorization timed out")
    except (RuntimeError, OSError) as exc:
        return AuthorizationFailed(str(exc))
    return parse_authorization_response(params, state)


@dataclass
class WebRedirect(PlatformRedirect):
    """Whole-page redirects with the callback served at the app origin."""

    launcher: BrowserLauncher
    broker: CallbackBroker
    origin: str | None
    default_origin: str
    timeout: float = 300.0
    response_mode: ClassVar[str] = "form_post"

    def _origin(self) -> str:
        return (self.origin or self.default_origin).rstrip("/")

    def redirect_uri(self) -> str:
        return f"{self._origin()}/{CALLBACK_PATH}"

    def post_logout_uri(self) -> str:
        return f"{self._origin()}/{LOGIN_PATH}"

    async def authorize(self, authorize_url: str, state: str) -> AuthorizationResult:
        """Navigate to the provider and wait for the callback POST."""
        return await _authorize(
            self.launcher, self.broker, authorize_url, state, self.timeout
        )

    async def end_session(self, logout_url: str) -> None:
        """Navigate the whole page to the provider logout."""
        if not await self.launcher.open(logout_url):
            raise RuntimeError("Browser refused to open the logout page")


@dataclass
class NativeBrowserSession(PlatformRedirect):
    """Transient browser sessions returning through a custom URL scheme."""

    launcher: BrowserLauncher
    broker: CallbackBroker
    scheme: str
    timeout: float = 300.0
    response_mode: ClassVar[str] = "fragment"

    def redirect_uri(self) -> str:
        return f"{self.scheme}://{CALLBACK_PATH}"

    def post_logout_uri(self) -> str:
        return f"{self.scheme}://{LOGIN_PATH}"

    async def authorize(self, authorize_url: str, state: str) -> AuthorizationResult:
        """Open the provider in a browser session and await the deep link."""
        return await _authorize(
            self.launcher, self.broker, authorize_url, state, self.timeout
        )

    async def end_session(self, logout_url: str) -> None:
        """Open the provider logout and await the return deep link."""
        try:
            params = await _await_redirect(
                self.launcher, self.broker, LOGOUT_KEY, logout_url, self.timeout
            )
        except TimeoutError:
            _logger.warning("Provider logout did not return before the timeout")
            return
        if params is None:
            _logger.info("Provider logout session was dismissed")


def select_platform_redirect(
    settings: Settings, launcher: BrowserLauncher, broker: CallbackBroker
) -> PlatformRedirect:
    """Pick the redirect variant for the configured platform."""
    if parse_platform(settings.platform) == PLATFORM_WEB:
        return WebRedirect(
            launcher=launcher,
            broker=broker,
            origin=settings.web_origin,
            default_origin=settings.web_default_origin,
            timeout=settings.authorization_timeout_seconds,
        )
    return NativeBrowserSession(
        launcher=launcher,
        broker=broker,
        scheme=settings.native_scheme,
        timeout=settings.authorization_timeout_seconds,
    )
