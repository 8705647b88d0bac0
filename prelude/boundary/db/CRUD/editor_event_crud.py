"""
Editor event CRUD operations.

Append and read-back of the editor event log. There is no update path:
events are written once and read in sequence order.

Dependencies: sqlalchemy, prelude.boundary.db.models, prelude.core.events
System role: Event log persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from prelude.boundary.db.CRUD.base_crud import BaseCRUD
from prelude.boundary.db.models.editor_event_model import EditorEventModel
from prelude.core.events import EditorEvent, EventKind, from_epoch_ms


class EditorEventCRUD(BaseCRUD[EditorEventModel]):
    """CRUD operations for EditorEventModel."""

    def __init__(self) -> None:
        """Initialize EditorEventCRUD with EditorEventModel."""
        super().__init__(EditorEventModel)

    async def append_batch(
        self,
        session: AsyncSession,
        session_id: UUID,
        events: Sequence[EditorEvent],
    ) -> int:
        """
        Append events in the given order, skipping redelivered ones.

        An event whose sequence number is already stored for the session (or
        repeated earlier in the same batch) is a redelivery and is skipped,
        so stored sequence numbers stay unique.

        Args:
            session: Async database session
            session_id: Owning session UUID
            events: Decoded events in client order

        Returns:
            int: Number of rows inserted
        """
        if not events:
            return 0

        stmt = select(EditorEventModel.sequence_number).where(
            EditorEventModel.session_id == session_id,
            EditorEventModel.sequence_number.in_({e.sequence_number for e in events}),
        )
        result = await session.execute(stmt)
        seen = set(result.scalars().all())

        rows = []
        for event in events:
            if event.sequence_number in seen:
                continue
            seen.add(event.sequence_number)
            rows.append(
                EditorEventModel(
                    session_id=session_id,
                    event_type=event.kind,
                    event_data=event.data,
                    timestamp=from_epoch_ms(event.timestamp_ms),
                    sequence_number=event.sequence_number,
                )
            )

        session.add_all(rows)
        await session.flush()
        return len(rows)

    async def list_by_session(
        self,
        session: AsyncSession,
        session_id: UUID,
        event_type: EventKind | None = None,
    ) -> Sequence[EditorEventModel]:
        """
        Events of a session ordered by sequence number.

        Args:
            session: Async database session
            session_id: Session UUID
            event_type: Optional kind filter

        Returns:
            Sequence of EditorEventModel rows
        """
        stmt = select(EditorEventModel).where(EditorEventModel.session_id == session_id)
        if event_type is not None:
            stmt = stmt.where(EditorEventModel.event_type == event_type)
        stmt = stmt.order_by(EditorEventModel.sequence_number)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_submissions(
        self,
        session: AsyncSession,
        session_id: UUID,
    ) -> Sequence[EditorEventModel]:
        return await self.list_by_session(session, session_id, EventKind.SUBMISSION)

    async def max_sequence_number(
        self,
        session: AsyncSession,
        session_id: UUID,
    ) -> int | None:
        """Highest stored sequence number for the session, None when empty."""
        stmt = select(func.max(EditorEventModel.sequence_number)).where(
            EditorEventModel.session_id == session_id
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


editor_event_crud = EditorEventCRUD()
