"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from . import auth, chat, system

router = APIRouter()

# Include all route modules
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(chat.router, prefix="/chat", tags=["Chat"])
router.include_router(system.router, prefix="/system", tags=["System"])
