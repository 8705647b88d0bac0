"""API-specific dependencies."""

from .dependencies import (
    get_chat_service,
    get_event_service,
    get_replay_service,
    get_session_service,
    get_settings_dependency,
    get_summary_service,
)

__all__ = [
    "get_chat_service",
    "get_event_service",
    "get_replay_service",
    "get_session_service",
    "get_settings_dependency",
    "get_summary_service",
]
