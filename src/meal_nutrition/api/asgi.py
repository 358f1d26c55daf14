"""ASGI entrypoint for the meal nutrition API."""

from meal_nutrition.api.app import create_app
from meal_nutrition.containers import build_container

app = create_app(build_container())
