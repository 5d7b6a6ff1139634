"""
Health check endpoints for the auth service
"""
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from typing import Dict, Any

from ..schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, Any]:
    """Liveness probe."""
    return {"ok": True}


@router.get("/ready", status_code=status.HTTP_200_OK)
def readiness_check(request: Request):
    """
    Readiness check endpoint with database status.

    Returns:
        dict: Readiness status, or a 503 response when the database is unreachable
    """
    db_connected = request.app.state.database.check_connection()

    response = {
        "status": "ready" if db_connected else "not_ready",
        "database": "connected" if db_connected else "disconnected",
    }

    if not db_connected:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response)

    return response
