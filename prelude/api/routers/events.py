"""
Editor event API endpoints.

Routes:
- POST /events - Append a batch of events to a session
- POST /events/submissions - List a session's submissions

Dependencies: prelude.application.services.event_service, prelude.models
System role: Persistence endpoint HTTP API
"""

import json
import logging

import pydantic
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.encoders import jsonable_encoder

from prelude.api.deps import get_event_service
from prelude.application.services.event_service import EventService
from prelude.core.exceptions import SessionNotFoundError, ValidationError
from prelude.models.events import (
    EventResponse,
    SaveEventsRequest,
    SaveEventsResponse,
    SubmissionsRequest,
    SubmissionsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=SaveEventsResponse)
async def save_events(
    request: Request,
    event_service: EventService = Depends(get_event_service),
) -> SaveEventsResponse:
    """
    Append a batch of editor events.

    The body is parsed here rather than by FastAPI because an empty body
    (an unload flush that lost its payload), ``{}`` and ``[]`` are all
    successful no-ops.

    Args:
        request: Raw request carrying {sessionId, events}
        event_service: Injected EventService

    Returns:
        SaveEventsResponse: success flag and savedCount

    Raises:
        HTTPException(400): Malformed body or event payload
        HTTPException(404): Session not found
    """
    raw = await request.body()
    if not raw.strip():
        return SaveEventsResponse(saved_count=0)

    try:
        body = json.loads(raw)
    except ValueError as e:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from e

    if isinstance(body, (dict, list)) and not body:
        return SaveEventsResponse(saved_count=0)

    try:
        batch = SaveEventsRequest.model_validate(body)
    except pydantic.ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail=jsonable_encoder(e.errors(include_url=False, include_context=False)),
        ) from e

    try:
        saved = await event_service.save_events(batch.session_id, batch.events)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message) from e

    return SaveEventsResponse(saved_count=saved)


@router.post("/submissions", response_model=SubmissionsResponse)
async def list_submissions(
    request: SubmissionsRequest,
    event_service: EventService = Depends(get_event_service),
) -> SubmissionsResponse:
    """
    Submission events of a session, ordered by sequence number.

    Raises:
        HTTPException(404): Session not found
    """
    try:
        rows = await event_service.list_submissions(request.session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from e
    return SubmissionsResponse(submissions=[EventResponse.from_model(row) for row in rows])
