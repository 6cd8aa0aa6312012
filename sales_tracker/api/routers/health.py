"""
API router for health checks

Provides endpoints for monitoring the health of the API and its database.
"""

from fastapi import APIRouter
import logging
import platform
import psutil

from sales_tracker.config.settings import settings
from sales_tracker.core.report_engine import utc_now
from sales_tracker.db.session import check_database_connection, engine

# Create router
router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/health",
    summary="Health check",
    description="Check API and database health status"
)
async def health_check():
    """
    Check API and component health status

    Returns:
        Dict: Health status of API components
    """
    health_data = {
        "status": "ok",
        "timestamp": utc_now().strftime("%Y-%m-%d %H:%M:%S"),
        "version": settings.APP_VERSION,
        "components": {}
    }

    db_status = check_database_connection()
    health_data["components"]["database"] = {
        "status": "ok" if db_status else "error",
        "message": "Connected" if db_status else "Failed to connect",
        "type": engine.dialect.name
    }
    if not db_status:
        health_data["status"] = "degraded"

    # System metrics
    health_data["system"] = {
        "cpu_usage": psutil.cpu_percent(interval=None),
        "memory_usage_percent": psutil.virtual_memory().percent,
        "python_version": platform.python_version(),
        "platform": platform.platform(),
    }

    return health_data


@router.get(
    "/liveness",
    summary="Liveness probe",
    description="Check if the API is running"
)
async def liveness_check():
    """
    Check if the API is running

    Returns:
        Dict: API liveness status
    """
    return {
        "status": "alive",
        "timestamp": utc_now().strftime("%Y-%m-%d %H:%M:%S")
    }
