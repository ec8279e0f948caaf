"""Health check endpoint for monitoring and load balancers."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from threadstore import __version__
from threadstore.api.dependencies import get_database
from threadstore.observability.logging import get_logger
from threadstore.storage.database import Database

logger = get_logger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckComponent(BaseModel):
    """Health status of a single component.

    Attributes:
        status: Component status (healthy, unhealthy)
        message: Optional status message or error details
    """

    status: str
    message: str | None = None


class HealthCheckResponse(BaseModel):
    """Overall health check response."""

    status: str
    components: dict[str, HealthCheckComponent]
    version: str = __version__


async def check_database_health(database: Database) -> HealthCheckComponent:
    """Check database connectivity with a trivial query."""
    try:
        await database.health_check()
        return HealthCheckComponent(status="healthy", message="Database connection successful")
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))
        return HealthCheckComponent(status="unhealthy", message=f"Database error: {str(e)}")


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(database: Database = Depends(get_database)) -> JSONResponse:
    """Report service health.

    Returns:
        200 OK if the database is reachable, 503 Service Unavailable otherwise
    """
    database_health = await check_database_health(database)
    overall_status = database_health.status
    status_code = (
        status.HTTP_200_OK
        if overall_status == "healthy"
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )

    response = HealthCheckResponse(
        status=overall_status,
        components={"database": database_health},
    )
    logger.info("health_check_completed", overall_status=overall_status)

    return JSONResponse(status_code=status_code, content=response.model_dump())
