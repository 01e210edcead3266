"""ASGI entrypoint for the ChronoSnap API."""

from chronosnap.api.app import create_app
from chronosnap.containers import build_container

app = create_app(build_container())
