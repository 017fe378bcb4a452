"""ASGI entrypoint for the AI service."""

from niume_ai.api.app import create_app
from niume_ai.containers import build_container

app = create_app(build_container())
