"""
Replay data schemas.

Everything the instructor replay view needs in one response: the session,
the full event log, the chat log, the timeline bounds and the compressed
timeline layout.

Dependencies: pydantic
System role: Replay API contracts
"""

import uuid
from typing import Any

from pydantic import Field

from prelude.core.events import ChatRole, EventKind
from prelude.models.common import CamelModel
from prelude.models.events import EventResponse
from prelude.models.session import SessionResponse


class ReplayMessage(CamelModel):
    """Chat message carrying its conversation for filtering."""

    id: int
    conversation_id: uuid.UUID
    conversation_title: str
    role: ChatRole
    content: str
    metadata: dict[str, Any] | None = None
    timestamp: int
    sequence_number: int


class ReplayConversation(CamelModel):
    id: uuid.UUID
    title: str


class IdlePeriodResponse(CamelModel):
    """Idle gap and its compressed middle zone, all epoch ms."""

    start: int
    end: int
    duration: int
    minutes: int
    zone_start: int
    zone_end: int


class TimelineMarkerResponse(CamelModel):
    timestamp: int
    position: float = Field(ge=0.0, le=1.0, description="Fraction of the compressed timeline")
    type: str
    tooltip: str


class ReplayDataResponse(CamelModel):
    """Full replay payload for one session."""

    session: SessionResponse
    events: list[EventResponse]
    conversations: list[ReplayConversation]
    messages: list[ReplayMessage]
    start_time: int = Field(description="Timeline start, epoch ms")
    end_time: int = Field(description="Timeline end, epoch ms")
    compressed_duration: float
    idle_periods: list[IdlePeriodResponse]
    markers: list[TimelineMarkerResponse]


class PasteIndicatorResponse(CamelModel):
    timestamp: int
    type: EventKind
    content: str


class FrameMessage(CamelModel):
    role: ChatRole
    content: str
    timestamp: int
    sequence_number: int
    conversation_id: str | None = None
    conversation_title: str | None = None


class ReplayFrameResponse(CamelModel):
    """Reconstructed view at one instant."""

    time: float
    document: Any
    text: str
    messages: list[FrameMessage]
    paste: PasteIndicatorResponse | None = None
