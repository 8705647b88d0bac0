"""
HTTP API: FastAPI routers and dependency injection.

All routers are mounted under /api/v1 by prelude.main.create_app.
"""

from fastapi import APIRouter

from prelude.api.routers import (
    conversations_router,
    events_router,
    health_router,
    sessions_router,
)

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(sessions_router)
api_router.include_router(events_router)
api_router.include_router(conversations_router)

__all__ = ["api_router"]
