"""FastAPI application factory for the threadstore API."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Response

from threadstore import __version__
from threadstore.api.middleware.correlation import CorrelationIdMiddleware
from threadstore.api.middleware.error_handler import setup_error_handlers
from threadstore.api.middleware.user import UserMiddleware
from threadstore.api.routes.conversations import router as conversations_router
from threadstore.api.routes.health import router as health_router
from threadstore.config import Settings, load_settings_from_env
from threadstore.observability.logging import setup_logging
from threadstore.observability.metrics import get_metrics_collector
from threadstore.storage.database import Database, DatabaseConfig

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    The application gets:
    - correlation id and user id middleware
    - error handlers mapping conversation errors to JSON responses
    - conversation routes under /api/v1/projects/{project_id}/conversations
    - /health and Prometheus /metrics endpoints
    - a Database opened on startup and closed on shutdown

    Args:
        settings: Settings to use; loaded from the environment when omitted

    Returns:
        Configured FastAPI application instance

    Examples:
        >>> app = create_app()
        >>> # uvicorn threadstore.api.app:app
    """
    settings = settings or load_settings_from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)
        logger.info("Application startup: opening database")

        database = Database(
            DatabaseConfig(url=settings.database_url, echo=settings.database_echo)
        )
        await database.create_tables()
        app.state.database = database

        try:
            yield
        finally:
            logger.info("Application shutdown: closing database")
            await database.close()

    app = FastAPI(
        title="threadstore API",
        version=__version__,
        description="Ownership-scoped conversation thread storage",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(UserMiddleware, header_name=settings.user_header)  # type: ignore[arg-type]
    app.add_middleware(CorrelationIdMiddleware)  # type: ignore[arg-type]

    setup_error_handlers(app)

    app.include_router(conversations_router)
    app.include_router(health_router)

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=get_metrics_collector().generate_metrics(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return app


# Module-level app instance for uvicorn
app = create_app()
