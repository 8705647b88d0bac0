"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: prelude.configs, prelude.application, prelude.boundary
System role: DI container for service injection
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from prelude.configs import Settings, get_settings
from prelude.boundary.db import get_async_db
from prelude.application.services import (
    ChatService,
    EventService,
    ReplayService,
    SessionService,
    SummaryService,
)


def get_settings_dependency() -> Settings:
    """
    Get application settings.

    Returns:
        Settings: Cached application settings
    """
    return get_settings()


def get_session_service(db: AsyncSession = Depends(get_async_db)) -> SessionService:
    """
    Get session service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        SessionService: Session service instance
    """
    return SessionService(db=db)


def get_event_service(db: AsyncSession = Depends(get_async_db)) -> EventService:
    """
    Get event persistence service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        EventService: Event service instance
    """
    return EventService(db=db)


def get_chat_service(db: AsyncSession = Depends(get_async_db)) -> ChatService:
    return ChatService(db=db)


def get_replay_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> ReplayService:
    """
    Get replay service instance.

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings (injected via Depends)

    Returns:
        ReplayService: Replay service configured with replay settings
    """
    return ReplayService(db=db, settings=settings.replay)


def get_summary_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> SummaryService:
    return SummaryService(db=db, settings=settings.replay)
