"""ASGI entrypoint for the dissertation portal API."""

from dissertation_portal.api.app import create_app
from dissertation_portal.containers import build_container

app = create_app(build_container())
