"""threadstore HTTP API."""

from threadstore.api.app import app, create_app

__all__ = ["app", "create_app"]
