"""Domain models for authentication state."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel


class User(BaseModel):
    """Backend user record mirrored on the client."""

    user_id: int
    email: str


class AuthStatus(str, Enum):
    """States of the session lifecycle."""

    RESTORING = "restoring"
    UNAUTHENTICATED = "unauthenticated"
    SIGNING_IN = "signing_in"
    AUTHENTICATED = "authenticated"
    SIGNING_OUT = "signing_out"


_LOADING_STATUSES = frozenset(
    {AuthStatus.RESTORING, AuthStatus.SIGNING_IN, AuthStatus.SIGNING_OUT}
)


@dataclass(frozen=True)
class AuthState:
    """Snapshot of the process-wide auth state."""

    status: AuthStatus = AuthStatus.RESTORING
    user: User | None = None
    error: str | None = None

    @property
    def is_logged_in(self) -> bool:
        """Return True when a restored or signed-in user is present."""
        if self.user is None:
            return False
        return self.status in {AuthStatus.AUTHENTICATED, AuthStatus.SIGNING_OUT}

    @property
    def is_loading(self) -> bool:
        """Return True while a restore or sign-in/out transition is running."""
        return self.status in _LOADING_STATUSES


@dataclass(frozen=True)
class PersistedCredential:
    """Credential set written on sign-in and removed on sign-out."""

    access_token: str
    user: User
    id_token: str | None = None


@dataclass(frozen=True)
class SignInResult:
    """Outcome of a sign-in attempt as exposed to screens."""

    ok: bool
    message: str | None = None
    ignored: bool = False


@dataclass(frozen=True)
class AuthorizationSuccess:
    """Tokens returned by the hosted authorization flow."""

    access_token: str
    id_token: str | None = None


@dataclass(frozen=True)
class AuthorizationCancelled:
    """The user dismissed the hosted flow."""


@dataclass(frozen=True)
class AuthorizationFailed:
    """The hosted flow reported an error or returned unusable data."""

    reason: str


AuthorizationResult = (
    AuthorizationSuccess | AuthorizationCancelled | AuthorizationFailed
)
