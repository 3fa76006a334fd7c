"""Route guard gating navigation on auth state."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from gym_companion.domain.auth import AuthState

LOGIN_ROUTE = "/login"
CALLBACK_ROUTE = "/callback"
LOGOUT_ROUTE = "/logout"
HOME_ROUTE = "/(tabs)"
LOADING_VIEW = "loading"

AUTH_ONLY_ROUTES = frozenset({LOGIN_ROUTE, CALLBACK_ROUTE})
PUBLIC_ROUTES = AUTH_ONLY_ROUTES | {LOGOUT_ROUTE}

_logger = logging.getLogger(__name__)


class Navigator(Protocol):
    """In-app router."""

    def replace(self, route: str) -> None:
        """Replace the current screen with a route."""


@dataclass
class RouteGuard:
    """Redirects between the login entry point and the main area."""

    navigator: Navigator
    debounce_seconds: float = 0.1
    current_route: str | None = None
    _state: AuthState = field(default_factory=AuthState, init=False)
    _pending: asyncio.TimerHandle | None = field(default=None, init=False)

    @property
    def view(self) -> str:
        """Return the waiting view while loading, otherwise the current route."""
        if self._state.is_loading or self.current_route is None:
            return LOADING_VIEW
        return self.current_route

    def on_state(self, state: AuthState) -> None:
        """React to an auth state change."""
        self._state = state
        self._cancel_pending()
        if state.is_loading:
            return
        target = self._settled_target()
        if target is None or target == self.current_route:
            return
        loop = asyncio.get_running_loop()
        self._pending = loop.call_later(self.debounce_seconds, self._redirect, target)

    def resolve(self, route: str) -> str | None:
        """Return where an explicit navigation request should land."""
        if self._state.is_loading:
            return None
        if route == LOGOUT_ROUTE:
            return route
        if self._state.is_logged_in:
            return HOME_ROUTE if route in AUTH_ONLY_ROUTES else route
        return route if route in PUBLIC_ROUTES else LOGIN_ROUTE

    def navigate(self, route: str) -> bool:
        """Navigate to a route if the guard allows it; return whether it moved."""
        target = self.resolve(route)
        if target is None:
            return False
        self._go(target)
        return True

    def close(self) -> None:
        """Drop any pending redirect."""
        self._cancel_pending()

    def _settled_target(self) -> str | None:
        if self.current_route is None:
            return HOME_ROUTE if self._state.is_logged_in else LOGIN_ROUTE
        if self.current_route == LOGOUT_ROUTE and not self._state.is_logged_in:
            return LOGIN_ROUTE
        return self.resolve(self.current_route)

    def _redirect(self, target: str) -> None:
        self._pending = None
        if self._state.is_loading:
            return
        self._go(target)

    def _go(self, route: str) -> None:
        if route == self.current_route:
            return
        _logger.debug("Navigating to %s", route)
        self.current_route = route
        self.navigator.replace(route)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
