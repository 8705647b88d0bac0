"""
Chat conversation and message ORM models.

Dependencies: sqlalchemy, prelude.boundary.db.base, prelude.core.events
System role: Chat log persistence replayed next to the editor
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prelude.boundary.db.base import Base, TimestampMixin, UUIDMixin, utc_now
from prelude.core.events import ChatRole

DEFAULT_CONVERSATION_TITLE = "New Conversation"


class ChatConversationModel(Base, UUIDMixin, TimestampMixin):
    """
    Named chat thread scoped to one student session.

    The title is the only field that changes after creation.
    """

    __tablename__ = "chat_conversations"

    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("student_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        default=DEFAULT_CONVERSATION_TITLE,
    )

    session = relationship("StudentSessionModel", back_populates="conversations")
    messages = relationship(
        "ChatMessageModel",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )


class ChatMessageModel(Base):
    """
    Chat message ORM model.

    Attributes:
        id: Storage-order primary key
        conversation_id: Owning conversation
        role: user or assistant
        content: Message text
        message_metadata: Optional flags (e.g. {"web_search": true})
        timestamp: Time the message was appended (UTC)
        sequence_number: Position within the conversation (server-assigned)
    """

    __tablename__ = "chat_messages"
    __table_args__ = (
        UniqueConstraint("conversation_id", "sequence_number", name="uq_message_conversation_sequence"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("chat_conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[ChatRole] = mapped_column(
        Enum(
            ChatRole,
            native_enum=False,
            length=16,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    message_metadata: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)

    conversation = relationship("ChatConversationModel", back_populates="messages")
