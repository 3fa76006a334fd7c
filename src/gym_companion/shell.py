"""App shell mounting the auth controller and the route guard."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from gym_companion.app_logging import configure_logging
from gym_companion.containers import AppContainer
from gym_companion.domain.auth import AuthState, SignInResult
from gym_companion.services.auth import AuthController
from gym_companion.services.routing import LOGOUT_ROUTE, Navigator, RouteGuard

_logger = logging.getLogger(__name__)


@dataclass
class AppShell:
    """Top-level client: restores the session and keeps the router in step."""

    container: AppContainer
    guard: RouteGuard
    _unsubscribe: Callable[[], None] | None = field(default=None, init=False)

    @classmethod
    def create(cls, container: AppContainer, navigator: Navigator) -> "AppShell":
        """Create a shell whose guard drives the given navigator."""
        guard = RouteGuard(
            navigator=navigator,
            debounce_seconds=container.settings.redirect_debounce_seconds,
        )
        return cls(container=container, guard=guard)

    @property
    def auth(self) -> AuthController:
        return self.container.auth_controller

    @property
    def state(self) -> AuthState:
        return self.auth.state

    @property
    def view(self) -> str:
        """Return the view to render: the waiting view or the current route."""
        return self.guard.view

    async def start(self) -> AuthState:
        """Mount the guard and restore the persisted session."""
        configure_logging()
        if self._unsubscribe is None:
            self._unsubscribe = self.auth.subscribe(self.guard.on_state)
            self.guard.on_state(self.auth.state)
        return await self.auth.restore()

    async def sign_in(self) -> SignInResult:
        """Run the login flow for the login screen's button."""
        result = await self.auth.sign_in()
        if not result.ok and not result.ignored:
            _logger.info("Login screen reports: %s", result.message)
        return result

    async def sign_out(self) -> None:
        """Run the logout screen: show it, sign out, then settle on login."""
        self.guard.navigate(LOGOUT_ROUTE)
        await self.auth.sign_out()

    def handle_deep_link(self, url: str) -> bool:
        """Deliver an OS deep link (for example ``myapp://callback#...``).

        Returns False when no sign-in or logout is waiting for the link.
        """
        handled = self.container.broker.complete_from_url(url)
        if not handled:
            _logger.info("Ignoring deep link with no waiting flow")
        return handled

    def navigate(self, route: str) -> bool:
        """Navigate to a screen if the current auth state allows it."""
        return self.guard.navigate(route)

    async def close(self) -> None:
        """Unmount the guard and release network resources."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.guard.close()
        await self.container.close_resources()
