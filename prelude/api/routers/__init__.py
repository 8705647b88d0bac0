"""API routers."""

from .conversations import router as conversations_router
from .events import router as events_router
from .health import router as health_router
from .sessions import router as sessions_router

__all__ = [
    "conversations_router",
    "events_router",
    "health_router",
    "sessions_router",
]
