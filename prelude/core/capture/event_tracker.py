"""
Editor event queue and batcher.

Buffers editor events produced on UI callbacks and flushes them to durable
storage without blocking further recording.

Snapshot triggers:
    - inactivity: a quiet period after the last activity
    - keystrokes: every N counted activities
    - ceiling: too long since the last snapshot while activity is pending

Flush policy:
    - snapshots and submissions flush immediately
    - other events flush at the batch size or when the oldest unflushed event
      reaches the batch delay
    - a failed batch goes back to the front of the queue, untouched

Dependencies: asyncio, prelude.configs, prelude.core
System role: Client-side capture of the event-sourced session log
"""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable

from prelude.configs.capture import CaptureSettings
from prelude.core.capture.scheduler import Scheduler, TimerHandle
from prelude.core.capture.transport import EventTransport
from prelude.core.events import (
    Document,
    EditorEvent,
    EventPayload,
    Paste,
    Snapshot,
    Submission,
)
from prelude.core.exceptions import FlushError
from prelude.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)


class SaveStatus(str, enum.Enum):
    """Save indicator states shown to the student."""

    READY = "ready"
    SAVING = "saving"
    SAVED = "saved"


SaveListener = Callable[[SaveStatus], None]
DocumentProvider = Callable[[], Document]


class EventTracker:
    """
    Per-session event queue with throttled activity tracking and batching.

    Sequence numbers are assigned here, at enqueue time, and never change
    afterwards, even when a batch is retried. One tracker per session and per
    tab; several tabs writing the same session are not supported.

    Attributes:
        session_id: Session the events belong to
        transport: Delivers batches to the persistence endpoint
        scheduler: Clock and timers
        document_provider: Returns the current document for snapshots
        settings: Throttling and batching configuration
    """

    def __init__(
        self,
        session_id: str,
        transport: EventTransport,
        scheduler: Scheduler,
        document_provider: DocumentProvider | None = None,
        settings: CaptureSettings | None = None,
        start_sequence: int = 0,
    ) -> None:
        """
        Initialize tracker.

        Args:
            session_id: Session UUID as string
            transport: Batch transport
            scheduler: Clock/timer provider
            document_provider: Callable returning the editor's current document
            settings: Capture settings (defaults from environment)
            start_sequence: First sequence number to assign (resume point)
        """
        self.session_id = session_id
        self.transport = transport
        self.scheduler = scheduler
        self.document_provider = document_provider
        self.settings = settings or CaptureSettings()

        self._queue: list[EditorEvent] = []
        self._next_sequence = start_sequence
        self._last_snapshot_ms = scheduler.now()
        self._last_activity_ms: int | None = None
        self._activity_count = 0
        self._keystroke_count = 0

        self._inactivity_timer: TimerHandle | None = None
        self._batch_timer: TimerHandle | None = None
        self._flush_lock = asyncio.Lock()

        self._listeners: list[SaveListener] = []
        self._status = SaveStatus.READY
        self.last_saved_count = 0

    @property
    def pending_events(self) -> tuple[EditorEvent, ...]:
        """Events queued but not yet confirmed by the server."""
        return tuple(self._queue)

    @property
    def next_sequence_number(self) -> int:
        return self._next_sequence

    @property
    def save_status(self) -> SaveStatus:
        return self._status

    @property
    def activity_count(self) -> int:
        """Counted activities since the last snapshot."""
        return self._activity_count

    def add_listener(self, listener: SaveListener) -> None:
        """Subscribe to saving/saved signals."""
        self._listeners.append(listener)

    def record_activity(self) -> None:
        """
        Note a document mutation.

        Calls closer together than the activity throttle are coalesced into
        the previous counted activity. Every call restarts the inactivity
        timer and re-evaluates the keystroke and ceiling triggers.
        """
        now = self.scheduler.now()
        if (
            self._last_activity_ms is None
            or now - self._last_activity_ms >= self.settings.activity_throttle_ms
        ):
            self._last_activity_ms = now
            self._activity_count += 1
            self._keystroke_count += 1

        self._restart_inactivity_timer()

        if self.should_take_snapshot():
            self._take_snapshot()

    def should_take_snapshot(self) -> bool:
        """Activity is pending and either the count or the ceiling is reached."""
        elapsed = self.scheduler.now() - self._last_snapshot_ms
        return self._activity_count > 0 and (
            self._keystroke_count >= self.settings.keystrokes_per_snapshot
            or elapsed >= self.settings.snapshot_ceiling_ms
        )

    def record_snapshot(self, document: Document) -> EditorEvent:
        """Queue a full document snapshot and flush immediately."""
        event = self._append(Snapshot(document=document))
        self._activity_count = 0
        self._keystroke_count = 0
        self._last_snapshot_ms = event.timestamp_ms
        return event

    def record_paste(self, content: str, is_internal: bool) -> EditorEvent:
        """Queue a paste with its provenance verdict (never throttled)."""
        return self._append(Paste(content=content, internal=is_internal))

    def record_submission(self, document: Document) -> EditorEvent:
        """Queue an explicit submission checkpoint and flush immediately."""
        return self._append(Submission(document=document))

    async def flush(self) -> int:
        """
        Send every queued event as one batch.

        Returns:
            int: Saved count reported by the server (0 on empty queue or failure)
        """
        async with self._flush_lock:
            if not self._queue:
                return 0

            batch = self._queue
            self._queue = []
            self._cancel_batch_timer()
            self._set_status(SaveStatus.SAVING)

            try:
                saved = await self.transport.send(
                    self.session_id, [event.to_wire() for event in batch]
                )
            except FlushError as e:
                # Back to the front, ahead of anything queued meanwhile
                self._queue = batch + self._queue
                log_with_context(
                    logger,
                    logging.WARNING,
                    "Event flush failed, batch re-queued",
                    session_id=self.session_id,
                    events=batch,
                    status_code=e.status_code,
                    error_msg=e.message,
                )
                self._arm_batch_timer()
                return 0

            self.last_saved_count = saved
            log_with_context(
                logger,
                logging.DEBUG,
                f"Saved {saved} events",
                session_id=self.session_id,
                events=batch,
            )
            self._set_status(SaveStatus.SAVED)
            return saved

    def force_flush(self) -> Awaitable[int]:
        """
        Best-effort flush for page unload.

        Returns:
            Awaitable resolving to the saved count; callers tearing down may
            drop it without awaiting.
        """
        self._cancel_batch_timer()
        return self.scheduler.spawn(self.flush())

    def close(self) -> None:
        """Cancel all pending timers."""
        if self._inactivity_timer is not None:
            self._inactivity_timer.cancel()
            self._inactivity_timer = None
        self._cancel_batch_timer()

    def _append(self, payload: EventPayload) -> EditorEvent:
        event = EditorEvent(
            payload=payload,
            timestamp_ms=self.scheduler.now(),
            sequence_number=self._next_sequence,
        )
        self._next_sequence += 1
        self._queue.append(event)
        self._schedule_save(event)
        return event

    def _schedule_save(self, event: EditorEvent) -> None:
        match event.payload:
            case Snapshot() | Submission():
                self._request_flush()
            case _ if len(self._queue) >= self.settings.batch_size:
                self._request_flush()
            case _:
                self._arm_batch_timer()

    def _request_flush(self) -> None:
        self._cancel_batch_timer()
        self.scheduler.spawn(self.flush())

    def _take_snapshot(self) -> None:
        if self.document_provider is None:
            return
        self.record_snapshot(self.document_provider())

    def _restart_inactivity_timer(self) -> None:
        if self._inactivity_timer is not None:
            self._inactivity_timer.cancel()
        self._inactivity_timer = self.scheduler.call_later(
            self.settings.inactivity_delay_ms, self._on_inactivity
        )

    def _on_inactivity(self) -> None:
        self._inactivity_timer = None
        if self._activity_count > 0:
            self._take_snapshot()

    def _arm_batch_timer(self) -> None:
        if self._batch_timer is None and self._queue:
            self._batch_timer = self.scheduler.call_later(
                self.settings.batch_delay_ms, self._on_batch_timer
            )

    def _on_batch_timer(self) -> None:
        self._batch_timer = None
        self.scheduler.spawn(self.flush())

    def _cancel_batch_timer(self) -> None:
        if self._batch_timer is not None:
            self._batch_timer.cancel()
            self._batch_timer = None

    def _set_status(self, status: SaveStatus) -> None:
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception(
                    "Save status listener failed",
                    extra={"session_id": self.session_id, "status": status.value},
                )
