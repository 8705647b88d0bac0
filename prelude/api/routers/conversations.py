"""
Chat conversation API endpoints.

Routes:
- POST /conversations - Create conversation
- GET /conversations?sessionId= - List a session's conversations
- PATCH /conversations/{id} - Rename conversation
- DELETE /conversations/{id} - Delete conversation
- POST /conversations/{id}/messages - Append message
- GET /conversations/{id}/messages - List messages

Dependencies: prelude.application.services.chat_service, prelude.models
System role: Chat log HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from prelude.api.deps import get_chat_service
from prelude.application.services import ChatService
from prelude.core.exceptions import ConversationNotFoundError, SessionNotFoundError
from prelude.models.chat import (
    AppendMessageRequest,
    ConversationListResponse,
    ConversationResponse,
    CreateConversationRequest,
    MessageListResponse,
    MessageResponse,
    RenameConversationRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    request: CreateConversationRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> ConversationResponse:
    """
    Create a conversation in a session.

    Raises:
        HTTPException(404): Session not found
    """
    try:
        conversation = await chat_service.create_conversation(
            request.session_id, title=request.title
        )
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return ConversationResponse(**conversation)


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    session_id: UUID = Query(alias="sessionId"),
    chat_service: ChatService = Depends(get_chat_service),
) -> ConversationListResponse:
    try:
        conversations = await chat_service.list_conversations(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return ConversationListResponse(
        conversations=[ConversationResponse(**c) for c in conversations]
    )


@router.patch("/{conversation_id}", response_model=ConversationResponse)
async def rename_conversation(
    conversation_id: UUID,
    request: RenameConversationRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> ConversationResponse:
    """
    Rename a conversation.

    Raises:
        HTTPException(404): Conversation not found
    """
    try:
        conversation = await chat_service.rename_conversation(conversation_id, request.title)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return ConversationResponse(**conversation)


@router.delete("/{conversation_id}", status_code=204)
async def delete_conversation(
    conversation_id: UUID,
    chat_service: ChatService = Depends(get_chat_service),
) -> None:
    try:
        await chat_service.delete_conversation(conversation_id)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=201,
)
async def append_message(
    conversation_id: UUID,
    request: AppendMessageRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> MessageResponse:
    """
    Append a user or assistant message.

    Raises:
        HTTPException(404): Conversation not found
    """
    try:
        message = await chat_service.append_message(
            conversation_id,
            role=request.role,
            content=request.content,
            metadata=request.metadata,
        )
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return MessageResponse(**message)


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def list_messages(
    conversation_id: UUID,
    chat_service: ChatService = Depends(get_chat_service),
) -> MessageListResponse:
    try:
        messages = await chat_service.list_messages(conversation_id)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return MessageListResponse(
        messages=[MessageResponse(**m) for m in messages],
        total=len(messages),
    )
