"""
Health check shared by all services.

``/healthz`` reports each dependency it checks and answers 503 when any of
them is unhealthy.
"""
import logging

from fastapi import status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def check_health(service: str, db: Session) -> JSONResponse:
    """
    Check the service's database connection.

    Args:
        service: Service name reported in the response
        db: Database session on which ``SELECT 1`` is run

    Returns:
        200 with ``status: healthy``, or 503 with ``status: unhealthy``
    """
    checks = {}
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        checks["database"] = "unhealthy"

    healthy = all(result == "healthy" for result in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"service": service, "status": "healthy" if healthy else "unhealthy", "checks": checks},
    )
