"""
Student session CRUD operations.

Dependencies: sqlalchemy, prelude.boundary.db.models
System role: Session persistence operations
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from prelude.boundary.db.base import utc_now
from prelude.boundary.db.CRUD.base_crud import BaseCRUD
from prelude.boundary.db.models.student_session_model import StudentSessionModel


class StudentSessionCRUD(BaseCRUD[StudentSessionModel]):
    """
    CRUD operations for StudentSessionModel.

    Extends BaseCRUD with the identity lookup used to resume a session and
    the last-saved refresh performed by the persistence endpoint.
    """

    def __init__(self) -> None:
        """Initialize StudentSessionCRUD with StudentSessionModel."""
        super().__init__(StudentSessionModel)

    async def get_by_assignment_and_email(
        self,
        session: AsyncSession,
        assignment_id: str,
        student_email: str,
    ) -> StudentSessionModel | None:
        """
        Find the session of one student for one assignment.

        Args:
            session: Async database session
            assignment_id: Assignment reference
            student_email: Student email (already normalized by the caller)

        Returns:
            StudentSessionModel if found, None otherwise
        """
        stmt = select(StudentSessionModel).where(
            StudentSessionModel.assignment_id == assignment_id,
            StudentSessionModel.student_email == student_email,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def touch_last_saved(
        self,
        session: AsyncSession,
        id: UUID,
        saved_at: datetime | None = None,
    ) -> None:
        """
        Set last_saved_at (defaults to now).

        Args:
            session: Async database session
            id: Session UUID
            saved_at: Time of the accepted batch
        """
        stmt = (
            update(StudentSessionModel)
            .where(StudentSessionModel.id == id)
            .values(last_saved_at=saved_at or utc_now())
        )
        await session.execute(stmt)


student_session_crud = StudentSessionCRUD()
