"""API middleware: correlation ids, caller identity and error handling."""

from threadstore.api.middleware.correlation import CorrelationIdMiddleware
from threadstore.api.middleware.error_handler import setup_error_handlers
from threadstore.api.middleware.user import UserMiddleware

__all__ = ["CorrelationIdMiddleware", "UserMiddleware", "setup_error_handlers"]
