"""Middleware that exposes the authenticated caller's user id.

Authentication itself happens upstream (an auth proxy or gateway). By the time
a request reaches this service the proxy has put the verified user id in a
header; this middleware copies it onto ``request.state.user_id``.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class UserMiddleware(BaseHTTPMiddleware):
    """Copy the user id header into request state.

    Requests without the header pass through with ``request.state.user_id``
    unset; routes that need a user reject them.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-User-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and set the user id if present.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware/handler in the chain

        Returns:
            The HTTP response from downstream handlers
        """
        user_id = request.headers.get(self.header_name)
        if user_id and user_id.strip():
            request.state.user_id = user_id.strip()

        response: Response = await call_next(request)
        return response
