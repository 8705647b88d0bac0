"""
Chat conversation and message CRUD operations.

Dependencies: sqlalchemy, prelude.boundary.db.models
System role: Chat log persistence operations
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from prelude.boundary.db.CRUD.base_crud import BaseCRUD
from prelude.boundary.db.models.chat_model import ChatConversationModel, ChatMessageModel
from prelude.core.events import ChatRole


class ChatConversationCRUD(BaseCRUD[ChatConversationModel]):
    """CRUD operations for ChatConversationModel."""

    def __init__(self) -> None:
        super().__init__(ChatConversationModel)

    async def list_by_session(
        self,
        session: AsyncSession,
        session_id: UUID,
    ) -> Sequence[ChatConversationModel]:
        """Conversations of a session, oldest first."""
        stmt = (
            select(ChatConversationModel)
            .where(ChatConversationModel.session_id == session_id)
            .order_by(ChatConversationModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def rename(
        self,
        session: AsyncSession,
        id: UUID,
        title: str,
    ) -> ChatConversationModel | None:
        """
        Change a conversation title.

        Returns:
            Updated ChatConversationModel if found, None otherwise
        """
        stmt = (
            update(ChatConversationModel)
            .where(ChatConversationModel.id == id)
            .values(title=title)
        )
        result = await session.execute(stmt)
        if result.rowcount == 0:
            return None
        conversation = await self.get_by_id(session, id)
        await session.refresh(conversation)
        return conversation


class ChatMessageCRUD(BaseCRUD[ChatMessageModel]):
    """CRUD operations for ChatMessageModel."""

    def __init__(self) -> None:
        super().__init__(ChatMessageModel)

    async def next_sequence_number(
        self,
        session: AsyncSession,
        conversation_id: UUID,
    ) -> int:
        stmt = select(func.max(ChatMessageModel.sequence_number)).where(
            ChatMessageModel.conversation_id == conversation_id
        )
        result = await session.execute(stmt)
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def append(
        self,
        session: AsyncSession,
        conversation_id: UUID,
        role: ChatRole,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> ChatMessageModel:
        """
        Append a message with the next per-conversation sequence number.

        Args:
            session: Async database session
            conversation_id: Owning conversation
            role: user or assistant
            content: Message text
            metadata: Optional flags

        Returns:
            Created ChatMessageModel
        """
        sequence_number = await self.next_sequence_number(session, conversation_id)
        return await self.create(
            session,
            conversation_id=conversation_id,
            role=role,
            content=content,
            message_metadata=metadata,
            sequence_number=sequence_number,
        )

    async def list_by_conversation(
        self,
        session: AsyncSession,
        conversation_id: UUID,
    ) -> Sequence[ChatMessageModel]:
        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.conversation_id == conversation_id)
            .order_by(ChatMessageModel.sequence_number)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_by_session(
        self,
        session: AsyncSession,
        session_id: UUID,
    ) -> Sequence[tuple[ChatMessageModel, ChatConversationModel]]:
        """
        All messages of a session with their conversation, by timestamp.

        Returns:
            Sequence of (message, conversation) pairs
        """
        stmt = (
            select(ChatMessageModel, ChatConversationModel)
            .join(
                ChatConversationModel,
                ChatMessageModel.conversation_id == ChatConversationModel.id,
            )
            .where(ChatConversationModel.session_id == session_id)
            .order_by(ChatMessageModel.timestamp, ChatMessageModel.id)
        )
        result = await session.execute(stmt)
        return [(message, conversation) for message, conversation in result.all()]


chat_conversation_crud = ChatConversationCRUD()
chat_message_crud = ChatMessageCRUD()
