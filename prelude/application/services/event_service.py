"""
Event persistence service.

Append-only storage of editor event batches and read-back of submissions.

Dependencies: prelude.boundary.db.CRUD, prelude.core.events
System role: Persistence endpoint use cases
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from prelude.boundary.db.CRUD import editor_event_crud, student_session_crud
from prelude.boundary.db.models import EditorEventModel
from prelude.core.events import EditorEvent
from prelude.core.exceptions import EventDecodeError, SessionNotFoundError, ValidationError
from prelude.models.events import WireEvent
from prelude.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class EventService:
    """Editor event persistence orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def save_events(self, session_id: UUID, events: Sequence[WireEvent]) -> int:
        """
        Append a batch of events to a session's log.

        Every event is decoded before anything is written, so a malformed
        batch stores nothing. An empty batch changes nothing, not even
        last_saved_at.

        Args:
            session_id: Session UUID
            events: Wire events in client order

        Returns:
            int: Size of the accepted batch

        Raises:
            ValidationError: An event payload does not match its kind
            SessionNotFoundError: Session does not exist
        """
        decoded: list[EditorEvent] = []
        for index, wire in enumerate(events):
            try:
                decoded.append(wire.to_domain())
            except EventDecodeError as e:
                raise ValidationError(
                    e.message, field=f"events[{index}]", details=e.details
                ) from e

        if not await student_session_crud.exists(self.db, session_id):
            raise SessionNotFoundError(session_id)

        if not decoded:
            return 0

        inserted = await editor_event_crud.append_batch(self.db, session_id, decoded)
        await student_session_crud.touch_last_saved(self.db, session_id)
        await self.db.commit()

        if inserted < len(decoded):
            logger.info(
                "Skipped redelivered events",
                extra={
                    "session_id": str(session_id),
                    "batch_size": len(decoded),
                    "inserted": inserted,
                },
            )
        log_with_context(
            logger,
            logging.DEBUG,
            "Saved event batch",
            session_id=session_id,
            batch_size=len(decoded),
            events=decoded,
        )
        return len(decoded)

    async def list_submissions(self, session_id: UUID) -> Sequence[EditorEventModel]:
        """
        Submission events of a session, ordered by sequence number.

        Raises:
            SessionNotFoundError: Session does not exist
        """
        if not await student_session_crud.exists(self.db, session_id):
            raise SessionNotFoundError(session_id)
        return await editor_event_crud.list_submissions(self.db, session_id)
