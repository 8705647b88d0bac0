"""
Session service orchestrator.

Coordinates the student session lifecycle: start (or resume), fetch, delete.

Dependencies: prelude.boundary.db.CRUD
System role: Session use case orchestration
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from prelude.boundary.db.CRUD import editor_event_crud, student_session_crud
from prelude.boundary.db.models import StudentSessionModel
from prelude.core.exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)


def session_to_dict(session: StudentSessionModel) -> dict[str, Any]:
    return {
        "id": session.id,
        "assignment_id": session.assignment_id,
        "student_name": session.student_name,
        "student_email": session.student_email,
        "is_verified": session.is_verified,
        "started_at": session.started_at,
        "last_saved_at": session.last_saved_at,
    }


class SessionService:
    """Session service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize session service with async database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    async def start_session(
        self,
        assignment_id: str,
        student_email: str,
        student_name: str | None = None,
        is_verified: bool = False,
    ) -> dict[str, Any]:
        """
        Start a session, or resume the student's existing one.

        A student has at most one session per assignment. Resuming reports
        the next free sequence number so the capture client continues the
        stream instead of restarting at zero.

        Args:
            assignment_id: Assignment reference
            student_email: Student identity (case-insensitive)
            student_name: Display name, defaults to the email
            is_verified: Whether the email was verified upstream

        Returns:
            dict: session_id, resumed flag and next_sequence_number
        """
        email = student_email.strip().lower()

        existing = await student_session_crud.get_by_assignment_and_email(
            self.db, assignment_id, email
        )
        if existing is not None:
            return await self._resume(existing)

        try:
            session = await student_session_crud.create(
                self.db,
                assignment_id=assignment_id,
                student_email=email,
                student_name=student_name or email,
                is_verified=is_verified,
            )
            await self.db.commit()
        except IntegrityError:
            # Concurrent start for the same student won the insert
            await self.db.rollback()
            existing = await student_session_crud.get_by_assignment_and_email(
                self.db, assignment_id, email
            )
            if existing is None:
                raise
            return await self._resume(existing)

        logger.info(
            "Student session started",
            extra={"session_id": str(session.id), "assignment_id": assignment_id},
        )
        return {"session_id": session.id, "resumed": False, "next_sequence_number": 0}

    async def _resume(self, session: StudentSessionModel) -> dict[str, Any]:
        max_sequence = await editor_event_crud.max_sequence_number(self.db, session.id)
        next_sequence = 0 if max_sequence is None else max_sequence + 1
        logger.info(
            "Student session resumed",
            extra={"session_id": str(session.id), "next_sequence_number": next_sequence},
        )
        return {
            "session_id": session.id,
            "resumed": True,
            "next_sequence_number": next_sequence,
        }

    async def get_session(self, session_id: UUID) -> dict[str, Any]:
        """
        Get session by ID.

        Raises:
            SessionNotFoundError: If session not found
        """
        session = await student_session_crud.get_by_id(self.db, session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session_to_dict(session)

    async def delete_session(self, session_id: UUID) -> bool:
        """
        Delete session with its events and conversations.

        Raises:
            SessionNotFoundError: If session not found
        """
        deleted = await student_session_crud.delete_by_id(self.db, session_id)
        if not deleted:
            raise SessionNotFoundError(session_id)
        await self.db.commit()
        logger.info("Student session deleted", extra={"session_id": str(session_id)})
        return True
