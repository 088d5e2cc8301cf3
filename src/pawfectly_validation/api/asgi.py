"""ASGI entrypoint for the photo validation API."""

from pawfectly_validation.api.app import create_app
from pawfectly_validation.containers import build_container

app = create_app(build_container())
