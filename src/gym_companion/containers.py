"""Dependency container wiring for the client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from gym_companion.adapters.api_client import ApiClient, HttpxApiClient
from gym_companion.adapters.auth0_client import HttpxAuth0Client
from gym_companion.adapters.platform_redirect import (
    BrowserLauncher,
    CallbackBroker,
    PlatformRedirect,
    SystemBrowserLauncher,
    select_platform_redirect,
)
from gym_companion.adapters.storage import KeyValueStore, select_store
from gym_companion.config import Settings
from gym_companion.services.ai_plans import AiPlanService
from gym_companion.services.auth import AuthController
from gym_companion.services.credentials import CredentialStore
from gym_companion.services.meal_plans import MealPlanService
from gym_companion.services.sessions import WorkoutSessionService
from gym_companion.services.workouts import WorkoutService


@dataclass
class AppContainer:
    """Holds client-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    api_client: ApiClient
    broker: CallbackBroker
    platform: PlatformRedirect
    auth_controller: AuthController
    workout_service: WorkoutService
    meal_plan_service: MealPlanService
    session_service: WorkoutSessionService
    ai_plan_service: AiPlanService
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None,
    store: KeyValueStore | None = None,
    launcher: BrowserLauncher | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_store = store or select_store(resolved_settings)
    api_client = HttpxApiClient.create(
        base_url=resolved_settings.api_base_url,
        store=resolved_store,
        timeout=resolved_settings.http_timeout_seconds,
    )
    auth0_client = HttpxAuth0Client.create(
        domain=resolved_settings.auth0_domain,
        client_id=resolved_settings.auth0_client_id,
        audience=resolved_settings.auth0_audience,
        timeout=resolved_settings.http_timeout_seconds,
    )
    broker = CallbackBroker()
    platform = select_platform_redirect(
        resolved_settings, launcher or SystemBrowserLauncher(), broker
    )
    auth_controller = AuthController(
        credentials=CredentialStore(resolved_store),
        provider=auth0_client,
        platform=platform,
        api_client=api_client,
    )

    async def close_resources() -> None:
        broker.cancel()
        await api_client.close()
        await auth0_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=resolved_store,
        api_client=api_client,
        broker=broker,
        platform=platform,
        auth_controller=auth_controller,
        workout_service=WorkoutService(api_client),
        meal_plan_service=MealPlanService(api_client),
        session_service=WorkoutSessionService(api_client),
        ai_plan_service=AiPlanService(api_client),
        close_resources=close_resources,
    )
