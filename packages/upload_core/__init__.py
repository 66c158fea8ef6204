"""Public API for upload server process assembly."""

from packages.upload_core.main import build_app, main

__all__ = ["build_app", "main"]
