"""
Session API endpoints.

Routes:
- POST /sessions/start - Start or resume a student session
- GET /sessions/{id} - Get session
- DELETE /sessions/{id} - Delete session with its logs
- GET /sessions/{id}/replay - Full replay payload
- GET /sessions/{id}/replay/frame - Reconstructed view at one instant
- GET /sessions/{id}/summary - Aggregate counts

Dependencies: prelude.application.services, prelude.models
System role: Session and replay HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from prelude.api.deps import get_replay_service, get_session_service, get_summary_service
from prelude.application.services import ReplayService, SessionService, SummaryService
from prelude.core.exceptions import SessionNotFoundError
from prelude.models.events import EventResponse
from prelude.models.replay import (
    FrameMessage,
    PasteIndicatorResponse,
    ReplayDataResponse,
    ReplayFrameResponse,
)
from prelude.models.session import (
    SessionResponse,
    StartSessionRequest,
    StartSessionResponse,
)
from prelude.models.summary import SessionSummaryResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("/start", response_model=StartSessionResponse)
async def start_session(
    request: StartSessionRequest,
    session_service: SessionService = Depends(get_session_service),
) -> StartSessionResponse:
    """
    Start a student session, or resume the existing one.

    Args:
        request: Assignment reference and student identity
        session_service: Injected SessionService

    Returns:
        StartSessionResponse: Session id, resumed flag and the next sequence number
    """
    result = await session_service.start_session(
        assignment_id=request.assignment_id,
        student_email=request.student_email,
        student_name=request.student_name,
        is_verified=request.is_verified,
    )
    return StartSessionResponse(**result)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: UUID,
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """
    Get session by ID.

    Raises:
        HTTPException(404): Session not found
    """
    try:
        session = await session_service.get_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return SessionResponse(**session)


@router.delete("/{session_id}", status_code=204)
async def delete_session(
    session_id: UUID,
    session_service: SessionService = Depends(get_session_service),
) -> None:
    """
    Delete session by ID, cascading to its events and conversations.

    Raises:
        HTTPException(404): Session not found
    """
    try:
        await session_service.delete_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e


@router.get("/{session_id}/replay", response_model=ReplayDataResponse)
async def get_replay_data(
    session_id: UUID,
    replay_service: ReplayService = Depends(get_replay_service),
) -> ReplayDataResponse:
    """
    Full replay payload: events, chat log, bounds and idle compression layout.

    Raises:
        HTTPException(404): Session not found
    """
    try:
        data = await replay_service.get_replay_data(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e

    data["session"] = SessionResponse(**data["session"])
    data["events"] = [EventResponse.from_model(row) for row in data["events"]]
    return ReplayDataResponse.model_validate(data)


@router.get("/{session_id}/replay/frame", response_model=ReplayFrameResponse)
async def get_replay_frame(
    session_id: UUID,
    at: int | None = Query(default=None, description="Epoch ms; defaults to the session end"),
    conversation_id: UUID | None = Query(default=None, alias="conversationId"),
    replay_service: ReplayService = Depends(get_replay_service),
) -> ReplayFrameResponse:
    """
    Reconstruct document, chat and paste badge at one instant.

    Raises:
        HTTPException(404): Session not found
    """
    try:
        frame = await replay_service.get_frame(session_id, at, conversation_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e

    paste = None
    if frame.paste is not None:
        paste = PasteIndicatorResponse(
            timestamp=frame.paste.timestamp_ms,
            type=frame.paste.kind,
            content=frame.paste.content,
        )
    return ReplayFrameResponse(
        time=frame.time_ms,
        document=frame.document,
        text=frame.text,
        messages=[
            FrameMessage(
                role=m.role,
                content=m.content,
                timestamp=m.timestamp_ms,
                sequence_number=m.sequence_number,
                conversation_id=m.conversation_id,
                conversation_title=m.conversation_title,
            )
            for m in frame.messages
        ],
        paste=paste,
    )


@router.get("/{session_id}/summary", response_model=SessionSummaryResponse)
async def get_summary(
    session_id: UUID,
    summary_service: SummaryService = Depends(get_summary_service),
) -> SessionSummaryResponse:
    """
    Aggregate counts for the instructor overview.

    Raises:
        HTTPException(404): Session not found
    """
    try:
        summary = await summary_service.get_summary(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return SessionSummaryResponse(**summary)
