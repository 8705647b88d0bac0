"""
Replay service.

Loads a session's event and chat logs, turns them into a ReplayTimeline and
serves the replay payload, single frames and the compressed timeline layout.

Dependencies: prelude.boundary.db.CRUD, prelude.core.replay, prelude.configs
System role: Instructor replay use cases
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from prelude.application.services.session_service import session_to_dict
from prelude.boundary.db.CRUD import (
    chat_conversation_crud,
    chat_message_crud,
    editor_event_crud,
    student_session_crud,
)
from prelude.boundary.db.models import (
    ChatConversationModel,
    ChatMessageModel,
    EditorEventModel,
    StudentSessionModel,
)
from prelude.configs.replay import ReplaySettings
from prelude.core.events import (
    ChatMessage,
    EditorEvent,
    decode_payload,
    to_epoch_ms,
)
from prelude.core.exceptions import EventDecodeError, SessionNotFoundError
from prelude.core.replay import IdleCompressionMapper, ReplayFrame, ReplayTimeline

logger = logging.getLogger(__name__)


def event_from_row(row: EditorEventModel) -> EditorEvent | None:
    """
    Decode a stored event row.

    Returns:
        EditorEvent, or None for a row that cannot be decoded (logged and left
        out so the replay degrades instead of failing)
    """
    try:
        payload = decode_payload(row.event_type, row.event_data, lenient=True)
    except EventDecodeError as e:
        logger.warning(
            "Skipping undecodable event in replay",
            extra={
                "session_id": str(row.session_id),
                "sequence_number": row.sequence_number,
                "error_msg": e.message,
            },
        )
        return None
    return EditorEvent(
        payload=payload,
        timestamp_ms=to_epoch_ms(row.timestamp),
        sequence_number=row.sequence_number,
    )


def message_from_row(
    message: ChatMessageModel, conversation: ChatConversationModel
) -> ChatMessage:
    return ChatMessage(
        role=message.role,
        content=message.content,
        timestamp_ms=to_epoch_ms(message.timestamp),
        sequence_number=message.sequence_number,
        conversation_id=str(conversation.id),
        conversation_title=conversation.title,
        metadata=message.message_metadata,
    )


@dataclass
class SessionLogs:
    """Raw rows of one session plus the timeline built from them."""

    session: StudentSessionModel
    event_rows: Sequence[EditorEventModel]
    conversations: Sequence[ChatConversationModel]
    message_rows: Sequence[tuple[ChatMessageModel, ChatConversationModel]]
    timeline: ReplayTimeline


class ReplayService:
    """Replay data orchestrator."""

    def __init__(self, db: AsyncSession, settings: ReplaySettings | None = None) -> None:
        """
        Initialize replay service.

        Args:
            db: Async SQLAlchemy session
            settings: Replay settings (defaults from environment)
        """
        self.db = db
        self.settings = settings or ReplaySettings()

    async def load_logs(self, session_id: UUID) -> SessionLogs:
        """
        Fetch every log of a session and build its timeline.

        Raises:
            SessionNotFoundError: Session does not exist
        """
        session = await student_session_crud.get_by_id(self.db, session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        event_rows = await editor_event_crud.list_by_session(self.db, session_id)
        conversations = await chat_conversation_crud.list_by_session(self.db, session_id)
        message_rows = await chat_message_crud.list_by_session(self.db, session_id)

        events = [e for e in (event_from_row(row) for row in event_rows) if e is not None]
        messages = [message_from_row(m, c) for m, c in message_rows]
        timeline = ReplayTimeline(
            events,
            messages,
            settings=self.settings,
            session_start_ms=to_epoch_ms(session.started_at),
        )
        return SessionLogs(session, event_rows, conversations, message_rows, timeline)

    def build_mapper(self, timeline: ReplayTimeline) -> IdleCompressionMapper:
        return IdleCompressionMapper(
            timeline.timestamps(),
            settings=self.settings,
            start_ms=timeline.start_ms,
            end_ms=timeline.end_ms,
        )

    async def get_replay_data(self, session_id: UUID) -> dict[str, Any]:
        """
        Everything the replay view needs for one session.

        Returns:
            dict: session, events (by sequence number), conversations,
                  messages (by timestamp), start/end bounds, idle periods
                  and scrubber markers

        Raises:
            SessionNotFoundError: Session does not exist
        """
        logs = await self.load_logs(session_id)
        timeline = logs.timeline
        mapper = self.build_mapper(timeline)

        logger.info(
            "Replay data loaded",
            extra={
                "session_id": str(session_id),
                "event_count": len(logs.event_rows),
                "message_count": len(logs.message_rows),
                "idle_periods": len(mapper.idle_periods),
            },
        )
        return {
            "session": session_to_dict(logs.session),
            "events": logs.event_rows,
            "conversations": [{"id": c.id, "title": c.title} for c in logs.conversations],
            "messages": [
                {
                    "id": m.id,
                    "conversation_id": c.id,
                    "conversation_title": c.title,
                    "role": m.role,
                    "content": m.content,
                    "metadata": m.message_metadata,
                    "timestamp": to_epoch_ms(m.timestamp),
                    "sequence_number": m.sequence_number,
                }
                for m, c in logs.message_rows
            ],
            "start_time": timeline.start_ms,
            "end_time": timeline.end_ms,
            "compressed_duration": mapper.compressed_duration,
            "idle_periods": [
                {
                    "start": p.start_ms,
                    "end": p.end_ms,
                    "duration": p.duration_ms,
                    "minutes": p.minutes,
                    "zone_start": p.zone_start_ms,
                    "zone_end": p.zone_end_ms,
                }
                for p in mapper.idle_periods
            ],
            "markers": [
                {
                    "timestamp": marker.timestamp_ms,
                    "position": mapper.real_to_fraction(marker.timestamp_ms),
                    "type": marker.kind,
                    "tooltip": marker.tooltip,
                }
                for marker in timeline.markers()
            ],
        }

    async def get_frame(
        self,
        session_id: UUID,
        at_ms: int | None = None,
        conversation_id: UUID | None = None,
    ) -> ReplayFrame:
        """
        Reconstruct the view at one instant.

        Args:
            session_id: Session UUID
            at_ms: Epoch ms to reconstruct (defaults to the timeline end)
            conversation_id: Restrict chat messages to one conversation

        Raises:
            SessionNotFoundError: Session does not exist
        """
        timeline = (await self.load_logs(session_id)).timeline
        at = timeline.end_ms if at_ms is None else at_ms
        return timeline.frame_at(
            at, str(conversation_id) if conversation_id is not None else None
        )
