"""ASGI entrypoint for the web callback receiver."""

from gym_companion.api.app import create_app
from gym_companion.containers import build_container

container = build_container()
app = create_app(container.broker, close_resources=container.close_resources)
app.state.container = container
