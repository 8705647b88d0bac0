"""
Session summary schema.

Dependencies: pydantic
System role: Summary API contract
"""

import uuid
from typing import Any

from prelude.models.common import CamelModel


class SessionSummaryResponse(CamelModel):
    """Aggregate counts over one session's logs."""

    session_id: uuid.UUID
    total_events: int
    snapshot_count: int
    submission_count: int
    internal_paste_count: int
    external_paste_count: int
    conversation_count: int
    user_message_count: int
    assistant_message_count: int
    active_typing_ms: int
    word_count: int
    latest_text: str
    latest_document: Any = None
    has_submission: bool
