"""ASGI entrypoint for the meal effects API."""

from meal_effects.api.app import create_app
from meal_effects.containers import build_container

app = create_app(build_container())
