"""
System endpoints.

Health checks and storage status.
"""

from fastapi import APIRouter

from ..deps import ServicesDep

router = APIRouter()


@router.get("/status")
async def get_status():
    """
    Health check endpoint.

    Returns system status for Docker healthcheck.
    """
    return {
        "status": "healthy",
        "service": "virtualdoc-api"
    }


@router.get("/db")
async def get_db_status(services: ServicesDep):
    """Report whether the account store is reachable."""
    state = services.accounts.status()
    return {
        "database": state,
        "message": "Database connected successfully" if state == "connected" else "Database connection issue"
    }
