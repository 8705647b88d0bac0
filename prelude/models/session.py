"""
Student session schemas.

Dependencies: pydantic
System role: Session API contracts
"""

import uuid
from datetime import datetime

from pydantic import Field

from prelude.models.common import CamelModel


class StartSessionRequest(CamelModel):
    """Start or resume a student's session for an assignment."""

    assignment_id: str = Field(min_length=1, max_length=255)
    student_email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    student_name: str | None = Field(default=None, max_length=255)
    is_verified: bool = False


class SessionResponse(CamelModel):
    """Response schema for session operations."""

    id: uuid.UUID
    assignment_id: str
    student_name: str | None
    student_email: str
    is_verified: bool
    started_at: datetime
    last_saved_at: datetime | None


class StartSessionResponse(CamelModel):
    """
    Started or resumed session.

    ``next_sequence_number`` is where the client tracker resumes numbering.
    """

    success: bool = True
    session_id: uuid.UUID
    resumed: bool
    next_sequence_number: int
