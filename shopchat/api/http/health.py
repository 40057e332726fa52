"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shopchat.logging import logger
from shopchat.storage.db import engine
from shopchat.utils.metrics import get_registered_connections

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    database: str
    registered_connections: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(response: Response) -> HealthResponse:
    """
    Check health status of the application and its database.

    Returns:
        HealthResponse: Health status of the service. The status code is
        503 Service Unavailable when the database is unreachable.
    """
    db_status = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "unhealthy"

    if db_status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status=db_status,
        database=db_status,
        registered_connections=get_registered_connections(),
    )
