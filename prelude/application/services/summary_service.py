"""
Session summary service.

Aggregate counts over a session's logs for the instructor overview. No
analysis beyond counting and summing.

Dependencies: prelude.application.services.replay_service, prelude.core.replay
System role: Instructor summary use case
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from prelude.application.services.replay_service import ReplayService
from prelude.configs.replay import ReplaySettings
from prelude.core.events import ChatRole, EditorEvent, Paste, Snapshot, Submission
from prelude.core.replay import ReplayTimeline, document_text


def active_typing_ms(snapshots: list[EditorEvent], gap_cap_ms: int) -> int:
    """
    Sum of gaps between consecutive snapshots, each capped.

    A gap longer than the cap is a break; only the cap counts toward
    active time.
    """
    total = 0
    for before, after in zip(snapshots, snapshots[1:]):
        total += min(after.timestamp_ms - before.timestamp_ms, gap_cap_ms)
    return total


def summarize(timeline: ReplayTimeline, gap_cap_ms: int) -> dict[str, Any]:
    """
    Counts and totals over one timeline.

    The word count is taken from the latest submission, or from the latest
    snapshot when nothing was submitted.
    """
    snapshots: list[EditorEvent] = []
    counts = {"internal": 0, "external": 0, "submission": 0}
    for event in timeline.events:
        match event.payload:
            case Snapshot():
                snapshots.append(event)
            case Paste(internal=True):
                counts["internal"] += 1
            case Paste():
                counts["external"] += 1
            case Submission():
                counts["submission"] += 1

    submissions = timeline.submissions_list()
    if submissions:
        latest_document = submissions[-1].payload.document
    else:
        latest_document = timeline.document_at(timeline.end_ms)
    latest_text = document_text(latest_document)

    roles = [m.role for m in timeline.messages]
    return {
        "total_events": len(timeline.events),
        "snapshot_count": len(snapshots),
        "submission_count": counts["submission"],
        "internal_paste_count": counts["internal"],
        "external_paste_count": counts["external"],
        "user_message_count": roles.count(ChatRole.USER),
        "assistant_message_count": roles.count(ChatRole.ASSISTANT),
        "active_typing_ms": active_typing_ms(snapshots, gap_cap_ms),
        "word_count": len(latest_text.split()),
        "latest_text": latest_text,
        "latest_document": latest_document,
        "has_submission": bool(submissions),
    }


class SummaryService:
    """Session summary orchestrator."""

    def __init__(self, db: AsyncSession, settings: ReplaySettings | None = None) -> None:
        self.db = db
        self.settings = settings or ReplaySettings()
        self._replay = ReplayService(db, self.settings)

    async def get_summary(self, session_id: UUID) -> dict[str, Any]:
        """
        Summarize one session.

        Raises:
            SessionNotFoundError: Session does not exist
        """
        logs = await self._replay.load_logs(session_id)
        summary = summarize(logs.timeline, self.settings.idle_threshold_ms)
        summary["session_id"] = session_id
        summary["conversation_count"] = len(logs.conversations)
        return summary
