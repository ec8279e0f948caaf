"""API route handlers."""

from threadstore.api.routes.conversations import router as conversations_router
from threadstore.api.routes.health import router as health_router

__all__ = ["conversations_router", "health_router"]
