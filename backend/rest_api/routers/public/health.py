"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its database.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.models import Menu, Restaurant
from shared.config.constants import MenuStatus
from shared.config.settings import settings
from shared.config.logging import rest_api_logger as logger
from shared.infrastructure.db import get_db


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }


@router.get("/health/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """
    Database connectivity plus a count of what the public side can serve.
    503 when the database is down.
    """
    checks = {
        "service": "rest-api",
        "environment": settings.environment,
        "dependencies": {},
    }

    try:
        db.execute(text("SELECT 1"))
        checks["dependencies"]["database"] = {"status": "healthy"}
        checks["catalog"] = {
            "restaurants": db.scalar(
                select(func.count(Restaurant.id)).where(Restaurant.is_active.is_(True))
            ),
            "published_menus": db.scalar(
                select(func.count(Menu.id)).where(
                    Menu.is_active.is_(True), Menu.status == MenuStatus.PUBLISHED
                )
            ),
        }
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        checks["dependencies"]["database"] = {"status": "unhealthy", "error": str(e)}
        checks["status"] = "degraded"
        return JSONResponse(content=checks, status_code=503)

    checks["status"] = "healthy"
    return checks
