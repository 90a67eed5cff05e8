"""ASGI entrypoint for the ScanMyCarbs API."""

from scanmycarbs.api.app import create_app
from scanmycarbs.containers import build_container

app = create_app(build_container())
