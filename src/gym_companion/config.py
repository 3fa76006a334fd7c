"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

PLATFORM_WEB = "web"
PLATFORM_NATIVE = "native"


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    auth0_client_id: str
    auth0_domain: str
    auth0_audience: str = "https://gym-companion-api"
    api_base_url: str
    platform: str = PLATFORM_NATIVE
    web_origin: str | None = None
    web_default_origin: str = "http://localhost:8081"
    native_scheme: str = "myapp"
    storage_path: str = "~/.gym_companion/credentials.db"
    storage_encryption_key: str | None = None
    http_timeout_seconds: float = 10.0
    authorization_timeout_seconds: float = 300.0
    redirect_debounce_seconds: float = 0.1
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_platform(raw: str | None) -> str:
    """Normalise the configured platform name."""
    if raw is None:
        return PLATFORM_NATIVE
    cleaned = raw.strip().lower()
    if cleaned in {"web", "browser"}:
        return PLATFORM_WEB
    if cleaned in {"", "native", "ios", "android", "desktop"}:
        return PLATFORM_NATIVE
    raise ValueError(f"Unsupported platform: {raw!r}")
