"""
Chat log service.

Conversations and messages of a student session. The assistant reply itself
is produced elsewhere; this service only records what was said.

Dependencies: prelude.boundary.db.CRUD
System role: Chat log use case orchestration
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from prelude.boundary.db.CRUD import (
    chat_conversation_crud,
    chat_message_crud,
    student_session_crud,
)
from prelude.boundary.db.models import (
    DEFAULT_CONVERSATION_TITLE,
    ChatConversationModel,
    ChatMessageModel,
)
from prelude.core.events import ChatRole, to_epoch_ms
from prelude.core.exceptions import ConversationNotFoundError, SessionNotFoundError

logger = logging.getLogger(__name__)


def conversation_to_dict(conversation: ChatConversationModel) -> dict[str, Any]:
    return {
        "id": conversation.id,
        "session_id": conversation.session_id,
        "title": conversation.title,
        "created_at": conversation.created_at,
        "updated_at": conversation.updated_at,
    }


def message_to_dict(message: ChatMessageModel) -> dict[str, Any]:
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "role": message.role,
        "content": message.content,
        "metadata": message.message_metadata,
        "timestamp": to_epoch_ms(message.timestamp),
        "sequence_number": message.sequence_number,
    }


class ChatService:
    """Chat conversation and message orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _require_session(self, session_id: UUID) -> None:
        if not await student_session_crud.exists(self.db, session_id):
            raise SessionNotFoundError(session_id)

    async def _require_conversation(self, conversation_id: UUID) -> ChatConversationModel:
        conversation = await chat_conversation_crud.get_by_id(self.db, conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def create_conversation(
        self,
        session_id: UUID,
        title: str | None = None,
    ) -> dict[str, Any]:
        """
        Open a new conversation in a session.

        Raises:
            SessionNotFoundError: Session does not exist
        """
        await self._require_session(session_id)
        conversation = await chat_conversation_crud.create(
            self.db,
            session_id=session_id,
            title=title or DEFAULT_CONVERSATION_TITLE,
        )
        await self.db.commit()
        logger.info(
            "Conversation created",
            extra={"session_id": str(session_id), "conversation_id": str(conversation.id)},
        )
        return conversation_to_dict(conversation)

    async def list_conversations(self, session_id: UUID) -> list[dict[str, Any]]:
        await self._require_session(session_id)
        conversations = await chat_conversation_crud.list_by_session(self.db, session_id)
        return [conversation_to_dict(c) for c in conversations]

    async def rename_conversation(self, conversation_id: UUID, title: str) -> dict[str, Any]:
        """
        Change a conversation's title (its only mutable field).

        Raises:
            ConversationNotFoundError: Conversation does not exist
        """
        conversation = await chat_conversation_crud.rename(self.db, conversation_id, title)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        await self.db.commit()
        return conversation_to_dict(conversation)

    async def delete_conversation(self, conversation_id: UUID) -> bool:
        """
        Delete a conversation and its messages.

        Raises:
            ConversationNotFoundError: Conversation does not exist
        """
        deleted = await chat_conversation_crud.delete_by_id(self.db, conversation_id)
        if not deleted:
            raise ConversationNotFoundError(conversation_id)
        await self.db.commit()
        logger.info("Conversation deleted", extra={"conversation_id": str(conversation_id)})
        return True

    async def append_message(
        self,
        conversation_id: UUID,
        role: ChatRole,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Append a message at the end of a conversation.

        Args:
            conversation_id: Target conversation
            role: user or assistant
            content: Message text
            metadata: Optional flags (e.g. web search)

        Returns:
            dict: Stored message with its sequence number

        Raises:
            ConversationNotFoundError: Conversation does not exist
        """
        await self._require_conversation(conversation_id)
        message = await chat_message_crud.append(
            self.db,
            conversation_id=conversation_id,
            role=ChatRole(role),
            content=content,
            metadata=metadata,
        )
        await self.db.commit()
        return message_to_dict(message)

    async def list_messages(self, conversation_id: UUID) -> list[dict[str, Any]]:
        await self._require_conversation(conversation_id)
        messages = await chat_message_crud.list_by_conversation(self.db, conversation_id)
        return [message_to_dict(m) for m in messages]
