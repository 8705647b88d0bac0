"""
Editor event ORM model.

Append-only log of editor facts: snapshots, pastes and submissions.

Dependencies: sqlalchemy, prelude.boundary.db.base, prelude.core.events
System role: Durable event log read back by the replay engine
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prelude.boundary.db.base import Base
from prelude.core.events import EventKind


class EditorEventModel(Base):
    """
    Editor event ORM model.

    The autoincrement id records storage order. Kind, payload, timestamp and
    sequence number are exactly what the client sent; rows are never updated.

    Attributes:
        id: Storage-order primary key
        session_id: Owning student session
        event_type: snapshot, paste_internal, paste_external or submission
        event_data: JSON payload (document block sequence or {"content": str})
        timestamp: Client wall-clock time (UTC)
        sequence_number: Position in the session's client event stream

    Constraints:
        (session_id, sequence_number): UNIQUE; redelivered events are skipped
    """

    __tablename__ = "editor_events"
    __table_args__ = (
        UniqueConstraint("session_id", "sequence_number", name="uq_event_session_sequence"),
        Index("ix_editor_events_session_timestamp", "session_id", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("student_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    event_type: Mapped[EventKind] = mapped_column(
        Enum(
            EventKind,
            native_enum=False,
            length=32,
            values_callable=lambda kinds: [kind.value for kind in kinds],
        ),
        nullable=False,
    )
    event_data: Mapped[Any] = mapped_column(JSON, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False)

    session = relationship("StudentSessionModel", back_populates="events")
