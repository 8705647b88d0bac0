"""
Student session ORM model.

One student's attempt at one assignment. Owns the session's editor events
and chat conversations.

Dependencies: sqlalchemy, prelude.boundary.db.base
System role: Session persistence for the capture and replay engine
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prelude.boundary.db.base import Base, TimestampMixin, UUIDMixin, utc_now


class StudentSessionModel(Base, UUIDMixin, TimestampMixin):
    """
    Student session ORM model.

    Created the first time a student opens an assignment link and only
    mutated afterwards by refreshing ``last_saved_at``. Deleting a session
    cascades to its events and conversations at the database level.

    Attributes:
        id: UUID primary key (auto-generated)
        assignment_id: External assignment reference
        student_name: Display name (optional)
        student_email: Student identity within the assignment
        is_verified: Whether the student's email was verified
        started_at: First access time (UTC)
        last_saved_at: Time of the last accepted event batch (UTC)

    Constraints:
        (assignment_id, student_email): one session per student per assignment
    """

    __tablename__ = "student_sessions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_email", name="uq_session_assignment_student"),
    )

    assignment_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    student_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    student_email: Mapped[str] = mapped_column(String(320), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    last_saved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    # Relationships (database-level cascade, never lazy-loaded in async code)
    events = relationship(
        "EditorEventModel",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
    conversations = relationship(
        "ChatConversationModel",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
