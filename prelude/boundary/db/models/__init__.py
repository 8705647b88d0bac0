"""
ORM models.

Importing this package registers every table on Base.metadata.
"""

from prelude.boundary.db.models.chat_model import (
    DEFAULT_CONVERSATION_TITLE,
    ChatConversationModel,
    ChatMessageModel,
)
from prelude.boundary.db.models.editor_event_model import EditorEventModel
from prelude.boundary.db.models.student_session_model import StudentSessionModel

__all__ = [
    "DEFAULT_CONVERSATION_TITLE",
    "ChatConversationModel",
    "ChatMessageModel",
    "EditorEventModel",
    "StudentSessionModel",
]
