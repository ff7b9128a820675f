"""ASGI entrypoint for the food miniapp API."""

from food_miniapp.api.app import create_app
from food_miniapp.containers import build_container

app = create_app(build_container())
