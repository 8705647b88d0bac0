"""Service orchestrators."""

from .chat_service import ChatService
from .event_service import EventService
from .replay_service import ReplayService
from .session_service import SessionService
from .summary_service import SummaryService

__all__ = [
    "ChatService",
    "EventService",
    "ReplayService",
    "SessionService",
    "SummaryService",
]
