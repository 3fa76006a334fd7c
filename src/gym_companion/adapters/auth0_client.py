"""Auth0 hosted endpoints client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlencode

import httpx

from gym_companion.errors import NetworkError

AUTH_SCOPES = ("openid", "profile", "email")


class IdentityProvider(Protocol):
    """Interface for the identity provider's hosted endpoints."""

    def build_authorize_url(
        self, *, redirect_uri: str, nonce: str, state: str, response_mode: str
    ) -> str:
        """Return the hosted authorization URL for a login attempt."""

    async def get_userinfo(self, access_token: str) -> dict[str, object]:
        """Fetch the provider profile for an access token."""

    def build_logout_url(self, return_to: str) -> str:
        """Return the hosted logout URL with a post-logout return target."""


@dataclass
class HttpxAuth0Client(IdentityProvider):
    """Auth0 client implemented with httpx."""

    domain: str
    client_id: str
    audience: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0

    @classmethod
    def create(
        cls, domain: str, client_id: str, audience: str, timeout: float = 10.0
    ) -> "HttpxAuth0Client":
        """Create an Auth0 client with a managed httpx session."""
        return cls(
            domain=domain,
            client_id=client_id,
            audience=audience,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    @property
    def base_url(self) -> str:
        domain = self.domain.removeprefix("https://").rstrip("/")
        return f"https://{domain}"

    def build_authorize_url(
        self, *, redirect_uri: str, nonce: str, state: str, response_mode: str
    ) -> str:
        """Build the implicit-flow authorize URL."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "token id_token",
            "response_mode": response_mode,
            "scope": " ".join(AUTH_SCOPES),
            "audience": self.audience,
            "nonce": nonce,
            "state": state,
        }
        return f"{self.base_url}/authorize?{urlencode(params)}"

    async def get_userinfo(self, access_token: str) -> dict[str, object]:
        """Fetch the userinfo profile using the access token."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}/userinfo",
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise NetworkError("Userinfo request failed") from exc
        if not isinstance(payload, dict):
            raise NetworkError("Userinfo response was not an object")
        return payload

    def build_logout_url(self, return_to: str) -> str:
        """Build the hosted logout URL."""
        params = {"client_id": self.client_id, "returnTo": return_to}
        return f"{self.base_url}/v2/logout?{urlencode(params)}"

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
