"""Error handling for the FastAPI application.

Converts conversation errors and request validation failures into JSON
responses of the form ``{"code": ..., "message": ...}``.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from threadstore.conversation.errors import ConversationError

logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application.

    Args:
        app: The FastAPI application instance to configure
    """

    @app.exception_handler(ConversationError)
    async def handle_conversation_error(request: Request, exc: ConversationError) -> JSONResponse:
        """Map a ConversationError to its status code and error code."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Format request parsing errors as a 400 with per-field details."""
        errors: list[dict[str, Any]] = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({"field": field, "message": error["msg"]})

        return JSONResponse(
            status_code=400,
            content={
                "code": "validation_error",
                "message": "Request validation failed",
                "errors": errors,
            },
        )

    @app.exception_handler(Exception)
    async def handle_generic_error(request: Request, exc: Exception) -> JSONResponse:
        """Log an unexpected exception and return a generic 500."""
        logger.exception("Unexpected error occurred: %s", exc)

        return JSONResponse(
            status_code=500,
            content={"code": "internal_error", "message": "An internal server error occurred"},
        )
