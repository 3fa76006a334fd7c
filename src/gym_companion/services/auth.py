"""Session lifecycle controller.

Owns the process-wide ``AuthState`` and drives it through restore, sign-in
and sign-out. Other components read the state through ``state`` and
``subscribe`` and never mutate it.
"""

import asyncio
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
from pydantic import ValidationError

from gym_companion.adapters.api_client import ApiClient
from gym_companion.adapters.auth0_client import IdentityProvider
from gym_companion.adapters.platform_redirect import PlatformRedirect
from gym_companion.domain.auth import (
    AuthorizationCancelled,
    AuthorizationFailed,
    AuthorizationResult,
    AuthorizationSuccess,
    AuthState,
    AuthStatus,
    PersistedCredential,
    SignInResult,
    User,
)
from gym_companion.errors import (
    GymCompanionError,
    InvalidResponseShape,
    NetworkError,
    ProviderCancelled,
)
from gym_companion.services.credentials import CredentialStore

REGISTER_USER_PATH = "/auth/register-auth0-user"

LOGIN_FAILED_MESSAGE = "Could not authenticate with Auth0"
LOGIN_ERROR_MESSAGE = "There was a problem logging in."
SIGN_IN_BUSY_MESSAGE = "Sign-in is already in progress."
SIGN_IN_SUPERSEDED_MESSAGE = "Sign-in was interrupted by sign-out."

AuthListener = Callable[[AuthState], None]

_logger = logging.getLogger(__name__)


@dataclass
class AuthController:
    """State machine for the client session."""

    credentials: CredentialStore
    provider: IdentityProvider
    platform: PlatformRedirect
    api_client: ApiClient
    _state: AuthState = field(default_factory=AuthState, init=False)
    _listeners: list[AuthListener] = field(default_factory=list, init=False)
    _attempt: int = field(default=0, init=False)

    @property
    def state(self) -> AuthState:
        """Return the current auth state."""
        return self._state

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a state listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def restore(self) -> AuthState:
        """Load the persisted credential and settle the initial state."""
        if self._state.status in {AuthStatus.SIGNING_IN, AuthStatus.SIGNING_OUT}:
            return self._state
        attempt = self._begin_attempt()
        self._set(AuthState(AuthStatus.RESTORING))
        credential: PersistedCredential | None = None
        try:
            credential = await self.credentials.load()
        finally:
            # A sign-out that started meanwhile owns the final state.
            if self._is_current(attempt):
                if credential is None:
                    self._set(AuthState(AuthStatus.UNAUTHENTICATED))
                else:
                    self._set(
                        AuthState(AuthStatus.AUTHENTICATED, user=credential.user)
                    )
        return self._state

    async def sign_in(self) -> SignInResult:  # noqa: PLR0911
        """Run the hosted login flow and register the backend user."""
        if self._state.is_loading:
            _logger.info("Ignoring sign-in while %s", self._state.status.value)
            return SignInResult(ok=False, message=SIGN_IN_BUSY_MESSAGE, ignored=True)
        if self._state.status is AuthStatus.AUTHENTICATED:
            return SignInResult(ok=True)

        attempt = self._begin_attempt()
        self._set(AuthState(AuthStatus.SIGNING_IN))
        try:
            outcome = await self._authorize()
            if not self._is_current(attempt):
                return _superseded()
            if isinstance(outcome, AuthorizationCancelled):
                raise ProviderCancelled("Hosted login was dismissed")
            if isinstance(outcome, AuthorizationFailed):
                _logger.warning("Hosted login failed: %s", outcome.reason)
                return self._fail(attempt, LOGIN_FAILED_MESSAGE)
            user = await self._complete_sign_in(attempt, outcome)
            if user is None:
                return _superseded()
        except ProviderCancelled:
            _logger.info("Sign-in cancelled by the user")
            return self._fail(attempt, LOGIN_FAILED_MESSAGE)
        except GymCompanionError:
            _logger.exception("Sign-in failed")
            return self._fail(attempt, LOGIN_ERROR_MESSAGE)
        except asyncio.CancelledError:
            if self._is_current(attempt):
                self._set(AuthState(AuthStatus.UNAUTHENTICATED))
            raise
        except Exception:
            _logger.exception("Unexpected sign-in error")
            return self._fail(attempt, LOGIN_ERROR_MESSAGE)

        self._set(AuthState(AuthStatus.AUTHENTICATED, user=user))
        _logger.info("Signed in user_id=%s", user.user_id)
        return SignInResult(ok=True)

    async def sign_out(self) -> None:
        """Clear the credential set and end the provider session.

        Any restore or sign-in still in flight is superseded and will not
        publish a logged-in state afterwards.
        """
        if self._state.status is AuthStatus.SIGNING_OUT:
            return
        self._begin_attempt()
        self._set(AuthState(AuthStatus.SIGNING_OUT, user=self._state.user))
        try:
            failed = await self.credentials.clear()
            if failed:
                _logger.warning("Signed out with undeleted keys: %s", ", ".join(failed))
            logout_url = self.provider.build_logout_url(self.platform.post_logout_uri())
            await self.platform.end_session(logout_url)
        except Exception:
            _logger.exception("Provider logout failed")
        finally:
            self._set(AuthState(AuthStatus.UNAUTHENTICATED))

    async def _authorize(self) -> AuthorizationResult:
        nonce = secrets.token_urlsafe(16)
        state = secrets.token_urlsafe(16)
        authorize_url = self.provider.build_authorize_url(
            redirect_uri=self.platform.redirect_uri(),
            nonce=nonce,
            state=state,
            response_mode=self.platform.response_mode,
        )
        return await self.platform.authorize(authorize_url, state)

    async def _complete_sign_in(
        self, attempt: int, tokens: AuthorizationSuccess
    ) -> User | None:
        profile = await self.provider.get_userinfo(tokens.access_token)
        subject = profile.get("sub")
        email = profile.get("email")
        if not isinstance(subject, str) or not isinstance(email, str):
            raise InvalidResponseShape("Userinfo is missing sub or email")
        user = await self._register_user(subject, email)
        if not self._is_current(attempt):
            return None
        await self.credentials.save(
            PersistedCredential(
                access_token=tokens.access_token, user=user, id_token=tokens.id_token
            )
        )
        if not self._is_current(attempt):
            _logger.info("Sign-out ran during the credential write; clearing it")
            failed = await self.credentials.clear()
            if failed:
                _logger.warning("Undeleted keys after sign-out: %s", ", ".join(failed))
            return None
        return user

    async def _register_user(self, subject: str, email: str) -> User:
        try:
            response = await self.api_client.post(
                REGISTER_USER_PATH, {"auth0_id": subject, "email": email}
            )
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise NetworkError("User registration failed") from exc
        user_payload = payload.get("user") if isinstance(payload, dict) else None
        try:
            return User.model_validate(user_payload)
        except ValidationError as exc:
            raise InvalidResponseShape("Registration response has no user") from exc

    def _begin_attempt(self) -> int:
        self._attempt += 1
        return self._attempt

    def _is_current(self, attempt: int) -> bool:
        return attempt == self._attempt

    def _fail(self, attempt: int, message: str) -> SignInResult:
        if self._is_current(attempt):
            self._set(AuthState(AuthStatus.UNAUTHENTICATED, error=message))
        return SignInResult(ok=False, message=message)

    def _set(self, state: AuthState) -> None:
        _logger.debug(
            "Auth state %s -> %s", self._state.status.value, state.status.value
        )
        self._state = state
        for listener in list(self._listeners):
            listener(state)


def _superseded() -> SignInResult:
    _logger.info("Sign-in superseded by sign-out")
    return SignInResult(ok=False, message=SIGN_IN_SUPERSEDED_MESSAGE, ignored=True)
