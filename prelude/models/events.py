"""
Editor event schemas.

Wire contract of the persistence endpoint: epoch-millisecond timestamps and
camelCase keys.

Dependencies: pydantic, prelude.core.events
System role: Event API contracts
"""

import uuid
from typing import Any

from pydantic import Field

from prelude.core.events import EditorEvent, EventKind, decode_payload, to_epoch_ms
from prelude.models.common import CamelModel


class WireEvent(CamelModel):
    """One event as sent by the capture client."""

    type: EventKind
    timestamp: int = Field(ge=0, description="Client wall-clock time, epoch ms")
    sequence_number: int = Field(ge=0, description="Client-assigned position in the session")
    data: Any = None

    def to_domain(self) -> EditorEvent:
        """
        Decode into the domain tagged union.

        Raises:
            EventDecodeError: Payload does not match the event kind
        """
        return EditorEvent(
            payload=decode_payload(self.type, self.data),
            timestamp_ms=self.timestamp,
            sequence_number=self.sequence_number,
        )


class SaveEventsRequest(CamelModel):
    """Batch of events for one session."""

    session_id: uuid.UUID
    events: list[WireEvent] = Field(default_factory=list)


class SaveEventsResponse(CamelModel):
    success: bool = True
    saved_count: int = 0


class SubmissionsRequest(CamelModel):
    session_id: uuid.UUID


class EventResponse(CamelModel):
    """Stored event as returned to replay and submission views."""

    id: int
    type: EventKind
    timestamp: int
    sequence_number: int
    data: Any = None

    @classmethod
    def from_model(cls, row: Any) -> "EventResponse":
        """Build from an EditorEventModel row."""
        return cls(
            id=row.id,
            type=row.event_type,
            timestamp=to_epoch_ms(row.timestamp),
            sequence_number=row.sequence_number,
            data=row.event_data,
        )


class SubmissionsResponse(CamelModel):
    submissions: list[EventResponse]
