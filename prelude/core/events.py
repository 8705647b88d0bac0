"""
Editor event and chat message domain types.

Editor events form a tagged union: the payload class (Snapshot, Paste,
Submission) is the tag, so every consumer dispatches with ``match`` over the
payload instead of comparing kind strings. The wire format used by the
persistence endpoint is ``{type, timestamp, sequenceNumber, data}`` with
epoch-millisecond timestamps.

Dependencies: None (pure domain layer)
System role: Shared vocabulary of the capture and replay engine
"""

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, TypeAlias

from prelude.core.exceptions import EventDecodeError

# A document is an opaque, JSON-serializable block sequence produced by the editor.
Document: TypeAlias = list[Any]


def empty_document() -> Document:
    """Return the canonical empty document (a fresh empty block sequence)."""
    return []


class EventKind(str, enum.Enum):
    """Stored/wire names of the editor event kinds."""

    SNAPSHOT = "snapshot"
    PASTE_INTERNAL = "paste_internal"
    PASTE_EXTERNAL = "paste_external"
    SUBMISSION = "submission"


class ChatRole(str, enum.Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Snapshot:
    """Full document state at a point in time (never a diff)."""

    document: Document


@dataclass(frozen=True)
class Paste:
    """A clipboard paste and its provenance verdict."""

    content: str
    internal: bool


@dataclass(frozen=True)
class Submission:
    """Document pinned by an explicit student submission."""

    document: Document


EventPayload: TypeAlias = Snapshot | Paste | Submission


@dataclass(frozen=True)
class EditorEvent:
    """
    Immutable, append-only fact about the editor.

    Attributes:
        payload: Tagged payload (Snapshot, Paste or Submission)
        timestamp_ms: Client wall-clock time in epoch milliseconds
        sequence_number: Position in the session's local event stream
    """

    payload: EventPayload
    timestamp_ms: int
    sequence_number: int

    @property
    def kind(self) -> EventKind:
        match self.payload:
            case Snapshot():
                return EventKind.SNAPSHOT
            case Paste(internal=True):
                return EventKind.PASTE_INTERNAL
            case Paste():
                return EventKind.PASTE_EXTERNAL
            case Submission():
                return EventKind.SUBMISSION
        raise EventDecodeError(f"Unsupported payload {type(self.payload).__name__}")

    @property
    def data(self) -> Any:
        """Payload in its stored JSON shape."""
        match self.payload:
            case Snapshot(document=document) | Submission(document=document):
                return document
            case Paste(content=content):
                return {"content": content}
        raise EventDecodeError(f"Unsupported payload {type(self.payload).__name__}")

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the persistence endpoint's event shape."""
        return {
            "type": self.kind.value,
            "timestamp": self.timestamp_ms,
            "sequenceNumber": self.sequence_number,
            "data": self.data,
        }

    @classmethod
    def from_wire(cls, wire: Mapping[str, Any]) -> "EditorEvent":
        """
        Build an event from its wire dict.

        Raises:
            EventDecodeError: Missing fields, unknown kind or malformed payload
        """
        try:
            kind = wire["type"]
            timestamp = int(wire["timestamp"])
            sequence_number = int(wire["sequenceNumber"])
        except (KeyError, TypeError, ValueError) as e:
            raise EventDecodeError(f"Malformed wire event: {e}") from e
        return cls(
            payload=decode_payload(kind, wire.get("data")),
            timestamp_ms=timestamp,
            sequence_number=sequence_number,
        )


def decode_payload(kind: str | EventKind, data: Any, *, lenient: bool = False) -> EventPayload:
    """
    Decode an ``(event_type, event_data)`` pair into its payload class.

    Incoming events are decoded strictly so nothing is stored in a shape
    other than the one the client sent. Replay reads stored rows leniently:
    a snapshot or submission whose data is not a block sequence becomes the
    empty document.

    Args:
        kind: Event kind name
        data: JSON payload
        lenient: Degrade unreadable documents instead of raising

    Returns:
        EventPayload: Snapshot, Paste or Submission

    Raises:
        EventDecodeError: Unknown kind, paste payload without string content,
            or (unless lenient) a document that is not a block sequence
    """
    try:
        event_kind = EventKind(kind)
    except ValueError as e:
        raise EventDecodeError(f"Unknown event kind: {kind}", kind=str(kind)) from e

    match event_kind:
        case EventKind.SNAPSHOT:
            return Snapshot(document=_as_document(data, event_kind, lenient))
        case EventKind.SUBMISSION:
            return Submission(document=_as_document(data, event_kind, lenient))
        case EventKind.PASTE_INTERNAL | EventKind.PASTE_EXTERNAL:
            content = data.get("content") if isinstance(data, Mapping) else None
            if not isinstance(content, str):
                raise EventDecodeError("Paste event without string content", kind=event_kind.value)
            return Paste(content=content, internal=event_kind is EventKind.PASTE_INTERNAL)


def _as_document(data: Any, kind: EventKind, lenient: bool) -> Document:
    if isinstance(data, list):
        return data
    if lenient:
        return empty_document()
    raise EventDecodeError(
        f"{kind.value.capitalize()} payload is not a block sequence", kind=kind.value
    )


@dataclass(frozen=True)
class ChatMessage:
    """
    A chat message as seen by the replay engine.

    Attributes:
        role: user or assistant
        content: Message text
        timestamp_ms: Epoch milliseconds
        sequence_number: Position within its conversation
        conversation_id: Owning conversation
        conversation_title: Title of the owning conversation
        metadata: Optional flags (e.g. web search)
    """

    role: ChatRole
    content: str
    timestamp_ms: int
    sequence_number: int
    conversation_id: str | None = None
    conversation_title: str | None = None
    metadata: dict[str, Any] | None = field(default=None)


def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(round(value.timestamp() * 1000))


def from_epoch_ms(value: int | float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
