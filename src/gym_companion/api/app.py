"""FastAPI callback receiver for hosted login and logout redirects."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Protocol

from fastapi import FastAPI, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from gym_companion.adapters.platform_redirect import LOGOUT_KEY
from gym_companion.app_logging import configure_logging

_DONE_PAGE = (
    "<!doctype html><html><body>"
    "<p>{message}</p><script>window.close();</script>"
    "</body></html>"
)


class CallbackSink(Protocol):
    """Receiver of redirect parameters, normally the ``CallbackBroker``."""

    def complete(self, key: str, params: dict[str, str]) -> bool:
        """Resolve the flow waiting on ``key``."""

    def cancel(self, key: str | None = None) -> bool:
        """Resolve a waiting flow as cancelled."""


def create_app(
    broker: CallbackSink,
    close_resources: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    """Create the callback receiver bound to a broker."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        app.state.broker.cancel()
        if close_resources is not None:
            await close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.broker = broker

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/callback", response_class=HTMLResponse)
    async def authorization_callback(  # noqa: PLR0913
        request: Request,
        state: str = Form(...),
        access_token: str | None = Form(default=None),
        id_token: str | None = Form(default=None),
        error: str | None = Form(default=None),
        error_description: str | None = Form(default=None),
    ) -> str:
        """Receive the ``form_post`` authorization response."""
        params = {
            key: value
            for key, value in {
                "state": state,
                "access_token": access_token,
                "id_token": id_token,
                "error": error,
                "error_description": error_description,
            }.items()
            if value is not None
        }
        sink: CallbackSink = request.app.state.broker
        if not sink.complete(state, params):
            logger.warning("Authorization callback for an unknown or expired attempt")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No sign-in is waiting for this response",
            )
        message = "Login failed." if error else "You are signed in."
        return _DONE_PAGE.format(message=message)

    @app.get("/callback", response_class=HTMLResponse)
    async def authorization_error(
        request: Request, state: str | None = None, error: str | None = None
    ) -> str:
        """Handle error redirects that arrive as query parameters."""
        if error is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Expected a form_post authorization response",
            )
        sink: CallbackSink = request.app.state.broker
        params = {"error": error}
        if state is not None:
            params["state"] = state
            sink.complete(state, params)
        else:
            sink.cancel()
        return _DONE_PAGE.format(message="Login failed.")

    @app.get("/login", response_class=HTMLResponse)
    async def post_logout_return(request: Request) -> str:
        """Post-logout return target."""
        sink: CallbackSink = request.app.state.broker
        sink.complete(LOGOUT_KEY, dict(request.query_params))
        return _DONE_PAGE.format(message="You are signed out.")

    return app
