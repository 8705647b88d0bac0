"""
Chat conversation and message schemas.

Dependencies: pydantic, prelude.core.events
System role: Chat API contracts
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field

from prelude.core.events import ChatRole
from prelude.models.common import CamelModel


class CreateConversationRequest(CamelModel):
    session_id: uuid.UUID
    title: str | None = Field(default=None, min_length=1, max_length=200)


class RenameConversationRequest(CamelModel):
    title: str = Field(min_length=1, max_length=200)


class ConversationResponse(CamelModel):
    id: uuid.UUID
    session_id: uuid.UUID
    title: str
    created_at: datetime
    updated_at: datetime


class ConversationListResponse(CamelModel):
    conversations: list[ConversationResponse]


class AppendMessageRequest(CamelModel):
    """A chat message to append to a conversation."""

    role: ChatRole
    content: str = Field(min_length=1)
    metadata: dict[str, Any] | None = None


class MessageResponse(CamelModel):
    """Chat message with its epoch-ms timestamp."""

    id: int
    conversation_id: uuid.UUID
    role: ChatRole
    content: str
    metadata: dict[str, Any] | None = None
    timestamp: int
    sequence_number: int


class MessageListResponse(CamelModel):
    messages: list[MessageResponse]
    total: int = Field(description="Total number of messages")
