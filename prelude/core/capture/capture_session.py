"""
Per-session capture context.

Wires the editor and chat callbacks of one open session to its event tracker
and its copy validator. Built when the student opens the session and closed
when they leave; nothing is shared between sessions.

Dependencies: prelude.core.capture, prelude.core.provenance, prelude.configs
System role: Capture-side entry point used by the editor UI
"""

import logging

from prelude.configs.settings import Settings, get_settings
from prelude.core.capture.event_tracker import DocumentProvider, EventTracker
from prelude.core.capture.scheduler import AsyncioScheduler, Scheduler
from prelude.core.capture.transport import EventTransport, HttpEventTransport
from prelude.core.events import Document, EditorEvent
from prelude.core.provenance import CopyValidator, PasteVerdict

logger = logging.getLogger(__name__)


class CaptureSession:
    """
    Editor and chat hooks for one student session.

    Usage:
        capture = CaptureSession.open(session_id, editor.get_document)
        capture.on_document_change()
        verdict = capture.on_paste(clipboard_text)
        await capture.close()
    """

    def __init__(
        self,
        tracker: EventTracker,
        validator: CopyValidator,
    ) -> None:
        self.tracker = tracker
        self.validator = validator
        self._closed = False

    @classmethod
    def open(
        cls,
        session_id: str,
        document_provider: DocumentProvider,
        settings: Settings | None = None,
        transport: EventTransport | None = None,
        scheduler: Scheduler | None = None,
        start_sequence: int = 0,
    ) -> "CaptureSession":
        """
        Build a capture context with its own tracker and validator.

        Args:
            session_id: Session UUID as string
            document_provider: Returns the editor's current document
            settings: Application settings (defaults to get_settings())
            transport: Batch transport (defaults to HTTP to the events endpoint)
            scheduler: Clock/timers (defaults to the running asyncio loop)
            start_sequence: Next sequence number reported by the session start call

        Returns:
            CaptureSession: Ready-to-use capture context
        """
        settings = settings or get_settings()
        transport = transport or HttpEventTransport(
            settings.capture.events_url,
            timeout_s=settings.capture.http_timeout_s,
        )
        tracker = EventTracker(
            session_id=session_id,
            transport=transport,
            scheduler=scheduler or AsyncioScheduler(),
            document_provider=document_provider,
            settings=settings.capture,
            start_sequence=start_sequence,
        )
        logger.info(
            "Capture session opened",
            extra={"session_id": session_id, "start_sequence": start_sequence},
        )
        return cls(tracker, CopyValidator(settings.provenance))

    @property
    def session_id(self) -> str:
        return self.tracker.session_id

    def on_document_change(self) -> None:
        """Editor mutation notification."""
        self.tracker.record_activity()

    def on_copy(self, text: str) -> None:
        """Text copied from inside the editor or chat panel."""
        self.validator.mark_internal_copy(text)

    def on_paste(self, text: str) -> PasteVerdict:
        """
        Classify and record a paste.

        Args:
            text: Pasted clipboard text

        Returns:
            PasteVerdict: Verdict recorded with the paste event
        """
        verdict = self.validator.classify_paste(text)
        self.tracker.record_paste(text, verdict.is_internal)
        if not verdict.is_internal:
            logger.info(
                "External paste recorded",
                extra={"session_id": self.session_id, "paste_length": len(text)},
            )
        return verdict

    def on_assistant_message(self, text: str) -> None:
        """Assistant reply shown in the chat panel."""
        self.validator.register_assistant_message(text)

    def submit(self, document: Document) -> EditorEvent:
        """Record an explicit submission of the given document."""
        return self.tracker.record_submission(document)

    async def close(self) -> int:
        """
        Flush what is left, stop timers and release the transport.

        Returns:
            int: Saved count of the final flush
        """
        if self._closed:
            return 0
        self._closed = True

        saved = await self.tracker.force_flush()
        self.tracker.close()

        aclose = getattr(self.tracker.transport, "aclose", None)
        if aclose is not None:
            await aclose()

        logger.info(
            "Capture session closed",
            extra={
                "session_id": self.session_id,
                "unsaved_events": len(self.tracker.pending_events),
            },
        )
        return saved
