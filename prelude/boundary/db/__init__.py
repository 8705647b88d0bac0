"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - create_tables(), drop_tables(): Schema management
  - StudentSessionModel, EditorEventModel, ChatConversationModel, ChatMessageModel: Entities
  - student_session_crud, editor_event_crud, chat_conversation_crud, chat_message_crud: CRUD singletons

Dependencies: sqlalchemy, prelude.configs
System role: Durable storage of sessions, the editor event log and the chat log
"""

from prelude.boundary.db.base import Base, TimestampMixin, UUIDMixin
from prelude.boundary.db.connection import (
    create_tables,
    drop_tables,
    enable_sqlite_foreign_keys,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from prelude.boundary.db.models import (
    ChatConversationModel,
    ChatMessageModel,
    EditorEventModel,
    StudentSessionModel,
)
from prelude.boundary.db.CRUD import (
    chat_conversation_crud,
    chat_message_crud,
    editor_event_crud,
    student_session_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "create_tables",
    "drop_tables",
    "enable_sqlite_foreign_keys",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "ChatConversationModel",
    "ChatMessageModel",
    "EditorEventModel",
    "StudentSessionModel",
    # CRUD singletons
    "chat_conversation_crud",
    "chat_message_crud",
    "editor_event_crud",
    "student_session_crud",
]
