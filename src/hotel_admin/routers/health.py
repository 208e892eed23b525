from datetime import UTC, datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from hotel_admin.db import SessionLocal
from hotel_admin.dependencies.permission_store import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        - status: overall health status
        - timestamp: current server time
        - database: database connection status
        - version: API version
    """
    settings = get_settings()
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": settings.app_name,
        "version": settings.version,
    }

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        health_status["database"] = "connected"
    except Exception as e:
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        health_status["error"] = str(e)
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health_status)
    finally:
        db.close()

    return health_status


@router.get("/readiness", status_code=status.HTTP_200_OK)
async def readiness_check():
    """Returns 200 if the service is ready to accept traffic."""
    return {"ready": True}


@router.get("/liveness", status_code=status.HTTP_200_OK)
async def liveness_check():
    return {"alive": True}
