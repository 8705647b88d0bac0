"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from prelude.boundary.db.CRUD import student_session_crud, editor_event_crud

    session = await student_session_crud.get_by_id(db, session_id)
    saved = await editor_event_crud.append_batch(db, session_id, events)
"""

from prelude.boundary.db.CRUD.base_crud import BaseCRUD
from prelude.boundary.db.CRUD.chat_crud import (
    ChatConversationCRUD,
    ChatMessageCRUD,
    chat_conversation_crud,
    chat_message_crud,
)
from prelude.boundary.db.CRUD.editor_event_crud import EditorEventCRUD, editor_event_crud
from prelude.boundary.db.CRUD.student_session_crud import (
    StudentSessionCRUD,
    student_session_crud,
)

__all__ = [
    "BaseCRUD",
    "ChatConversationCRUD",
    "ChatMessageCRUD",
    "EditorEventCRUD",
    "StudentSessionCRUD",
    "chat_conversation_crud",
    "chat_message_crud",
    "editor_event_crud",
    "student_session_crud",
]
