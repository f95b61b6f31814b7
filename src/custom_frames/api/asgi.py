"""ASGI entrypoint for the custom frames server."""

from custom_frames.api.app import create_app
from custom_frames.containers import build_container

app = create_app(build_container())
