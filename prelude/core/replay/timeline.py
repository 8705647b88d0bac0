"""
Replay timeline reconstruction.

Answers "what was visible at time T" for a finished session: the latest
snapshot at or before T, the chat messages sent by T, and whether a paste
badge is showing. Snapshots are full documents, so every query is a binary
search over sorted timestamps rather than a replay from the first event.

Reconstruction is a pure function of (events, messages, T).

Dependencies: bisect (stdlib), prelude.core.events, prelude.configs
System role: Instructor-side reconstruction of session state
"""

import bisect
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from prelude.configs.replay import ReplaySettings
from prelude.core.events import (
    ChatMessage,
    ChatRole,
    Document,
    EditorEvent,
    EventKind,
    Paste,
    Snapshot,
    Submission,
    empty_document,
)

TOOLTIP_PREVIEW_CHARS = 50


@dataclass(frozen=True)
class PasteIndicator:
    """Transient paste badge shown during replay."""

    timestamp_ms: int
    internal: bool
    content: str

    @property
    def kind(self) -> EventKind:
        return EventKind.PASTE_INTERNAL if self.internal else EventKind.PASTE_EXTERNAL


@dataclass(frozen=True)
class TimelineMarker:
    """A chat or paste tick drawn on the scrubber."""

    timestamp_ms: int
    kind: str
    tooltip: str


@dataclass(frozen=True)
class ReplayFrame:
    """Everything the replay view shows at one instant."""

    time_ms: float
    document: Document
    text: str
    messages: tuple[ChatMessage, ...]
    paste: PasteIndicator | None


def document_text(document: Any) -> str:
    """
    Plain text of a block-sequence document.

    Text runs of each paragraph block are concatenated and paragraphs are
    joined by newlines. Other block types and malformed entries are skipped.

    Args:
        document: Block sequence as stored in a snapshot

    Returns:
        str: Stripped plain text ("" for anything unreadable)
    """
    if not isinstance(document, list):
        return ""

    text = ""
    for block in document:
        if not isinstance(block, dict) or block.get("type") != "paragraph":
            continue
        content = block.get("content")
        if not isinstance(content, list):
            continue
        for item in content:
            if isinstance(item, dict) and item.get("type") == "text" and item.get("text"):
                text += str(item["text"])
        text += "\n"
    return text.strip()


class ReplayTimeline:
    """
    Point-in-time view over one session's event and chat logs.

    Events are ordered once by (timestamp, sequence number) and messages by
    timestamp (stable, so equal timestamps keep their given order). Each
    query bisects a parallel timestamp array.

    Attributes:
        events: Editor events in replay order
        messages: Chat messages in replay order
        settings: Paste badge window and empty-session length
    """

    def __init__(
        self,
        events: Iterable[EditorEvent],
        messages: Iterable[ChatMessage] = (),
        settings: ReplaySettings | None = None,
        session_start_ms: int | None = None,
    ) -> None:
        self.settings = settings or ReplaySettings()
        self.events: tuple[EditorEvent, ...] = tuple(
            sorted(events, key=lambda e: (e.timestamp_ms, e.sequence_number))
        )
        self.messages: tuple[ChatMessage, ...] = tuple(
            sorted(messages, key=lambda m: m.timestamp_ms)
        )
        self._session_start_ms = session_start_ms

        self._snapshots: list[EditorEvent] = []
        self._pastes: list[EditorEvent] = []
        self._submissions: list[EditorEvent] = []
        for event in self.events:
            match event.payload:
                case Snapshot():
                    self._snapshots.append(event)
                case Paste():
                    self._pastes.append(event)
                case Submission():
                    self._submissions.append(event)

        self._snapshot_ts = [e.timestamp_ms for e in self._snapshots]
        self._paste_ts = [e.timestamp_ms for e in self._pastes]
        self._message_ts = [m.timestamp_ms for m in self.messages]

    @property
    def start_ms(self) -> int:
        """Earliest editor event or chat message, else the session start."""
        candidates = []
        if self.events:
            candidates.append(self.events[0].timestamp_ms)
        if self.messages:
            candidates.append(self.messages[0].timestamp_ms)
        if candidates:
            return min(candidates)
        return self._session_start_ms or 0

    @property
    def end_ms(self) -> int:
        """Latest editor event, else start plus the empty-session length."""
        if self.events:
            return max(self.start_ms, self.events[-1].timestamp_ms)
        return self.start_ms + self.settings.empty_session_duration_ms

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms

    def timestamps(self) -> list[int]:
        """All editor event and chat message timestamps, sorted."""
        return sorted(self._message_ts + [e.timestamp_ms for e in self.events])

    def document_at(self, time_ms: float) -> Document:
        """
        Latest snapshot document at or before time_ms.

        Returns:
            Document: The snapshot payload as stored, or the empty document
        """
        index = bisect.bisect_right(self._snapshot_ts, time_ms)
        if index == 0:
            return empty_document()
        return self._snapshots[index - 1].payload.document

    def messages_at(
        self, time_ms: float, conversation_id: str | None = None
    ) -> tuple[ChatMessage, ...]:
        """Chat messages sent at or before time_ms, optionally for one conversation."""
        visible = self.messages[: bisect.bisect_right(self._message_ts, time_ms)]
        if conversation_id is None:
            return visible
        return tuple(m for m in visible if m.conversation_id == conversation_id)

    def paste_indicator_at(self, time_ms: float) -> PasteIndicator | None:
        """Latest paste within the badge window ending at time_ms, if any."""
        index = bisect.bisect_right(self._paste_ts, time_ms)
        if index == 0:
            return None
        event = self._pastes[index - 1]
        if event.timestamp_ms <= time_ms - self.settings.paste_indicator_window_ms:
            return None
        return PasteIndicator(
            timestamp_ms=event.timestamp_ms,
            internal=event.payload.internal,
            content=event.payload.content,
        )

    def submissions_list(self) -> list[EditorEvent]:
        """Submission events ordered by sequence number."""
        return sorted(self._submissions, key=lambda e: e.sequence_number)

    def frame_at(
        self, time_ms: float, conversation_id: str | None = None
    ) -> ReplayFrame:
        document = self.document_at(time_ms)
        return ReplayFrame(
            time_ms=time_ms,
            document=document,
            text=document_text(document),
            messages=self.messages_at(time_ms, conversation_id),
            paste=self.paste_indicator_at(time_ms),
        )

    def markers(self) -> list[TimelineMarker]:
        """User chat messages and pastes as scrubber markers, by time."""
        markers = [
            TimelineMarker(
                timestamp_ms=m.timestamp_ms,
                kind="chat",
                tooltip=f'Chat: "{m.content[:TOOLTIP_PREVIEW_CHARS]}..."',
            )
            for m in self.messages
            if m.role == ChatRole.USER
        ]
        for event in self._pastes:
            external = not event.payload.internal
            markers.append(
                TimelineMarker(
                    timestamp_ms=event.timestamp_ms,
                    kind=event.kind.value,
                    tooltip="External paste attempt" if external else "Internal paste",
                )
            )
        markers.sort(key=lambda marker: marker.timestamp_ms)
        return markers
