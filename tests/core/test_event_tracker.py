"""
Test suite for EventTracker.

Drives the tracker with a virtual clock: activity throttling, the three
snapshot triggers, batching, failure re-queueing and save status signals.

System role: Verification of client-side event capture
"""

import logging

import pytest

from prelude.configs.capture import CaptureSettings
from prelude.core.capture import EventTracker, SaveStatus, VirtualScheduler
from prelude.core.events import EventKind, Paste


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler(start_ms=0)


@pytest.fixture
def settings() -> CaptureSettings:
    """Default timings, pinned so environment overrides cannot leak in."""
    return CaptureSettings(
        activity_throttle_ms=1000,
        inactivity_delay_ms=1000,
        keystrokes_per_snapshot=10,
        snapshot_ceiling_ms=3000,
        batch_size=10,
        batch_delay_ms=5000,
    )


@pytest.fixture
def tracker(stub_transport, scheduler, settings, sample_document) -> EventTracker:
    return EventTracker(
        session_id="session-1",
        transport=stub_transport,
        scheduler=scheduler,
        document_provider=lambda: sample_document,
        settings=settings,
    )


class TestEventTrackerSnapshots:
    """Test suite for activity tracking and snapshot triggers."""

    @pytest.mark.asyncio
    async def test_single_activity_should_snapshot_after_inactivity(
        self, tracker, scheduler, stub_transport, sample_document
    ) -> None:
        """Test one edit then silence produces exactly one saved snapshot."""
        # Arrange
        tracker.record_activity()

        # Act
        scheduler.advance(1000)
        await scheduler.settle()

        # Assert
        sent = stub_transport.sent_events
        assert len(sent) == 1
        assert sent[0]["type"] == "snapshot"
        assert sent[0]["timestamp"] == 1000
        assert sent[0]["sequenceNumber"] == 0
        assert sent[0]["data"] == sample_document
        assert tracker.pending_events == ()
        assert tracker.last_saved_count == 1
        assert tracker.save_status is SaveStatus.SAVED

    @pytest.mark.asyncio
    async def test_record_activity_should_coalesce_within_throttle(
        self, tracker, scheduler
    ) -> None:
        """Test calls inside the throttle window count once."""
        tracker.record_activity()
        scheduler.advance(300)
        tracker.record_activity()
        scheduler.advance(300)
        tracker.record_activity()

        assert tracker.activity_count == 1

    @pytest.mark.asyncio
    async def test_record_activity_should_restart_inactivity_timer(
        self, tracker, scheduler, stub_transport
    ) -> None:
        """Test the pause snapshot waits for a full quiet period after the last call."""
        tracker.record_activity()
        scheduler.advance(800)
        tracker.record_activity()

        scheduler.advance(900)
        await scheduler.settle()
        assert stub_transport.sent_events == []

        scheduler.advance(100)
        await scheduler.settle()
        assert [e["timestamp"] for e in stub_transport.sent_events] == [1800]

    @pytest.mark.asyncio
    async def test_keystroke_count_should_force_snapshot(
        self, stub_transport, scheduler, sample_document
    ) -> None:
        """Test the Nth counted activity snapshots without waiting for a pause."""
        # Arrange
        settings = CaptureSettings(
            inactivity_delay_ms=5000, snapshot_ceiling_ms=60_000, keystrokes_per_snapshot=10
        )
        tracker = EventTracker(
            "session-1", stub_transport, scheduler, lambda: sample_document, settings
        )

        # Act
        for _ in range(9):
            tracker.record_activity()
            scheduler.advance(1000)
        assert tracker.pending_events == ()
        tracker.record_activity()
        await scheduler.settle()

        # Assert
        assert [e["timestamp"] for e in stub_transport.sent_events] == [9000]
        assert tracker.activity_count == 0

    @pytest.mark.asyncio
    async def test_snapshot_ceiling_should_force_snapshot(
        self, stub_transport, scheduler, sample_document
    ) -> None:
        """Test steady activity still snapshots once the ceiling elapses."""
        settings = CaptureSettings(
            inactivity_delay_ms=5000, snapshot_ceiling_ms=3000, keystrokes_per_snapshot=100
        )
        tracker = EventTracker(
            "session-1", stub_transport, scheduler, lambda: sample_document, settings
        )

        for _ in range(3):
            tracker.record_activity()
            scheduler.advance(1000)
        tracker.record_activity()
        await scheduler.settle()

        assert [e["timestamp"] for e in stub_transport.sent_events] == [3000]

    def test_should_take_snapshot_should_need_pending_activity(
        self, tracker, scheduler
    ) -> None:
        """Test the ceiling alone does not trigger without activity."""
        scheduler.advance(10_000)

        assert tracker.should_take_snapshot() is False

    @pytest.mark.asyncio
    async def test_inactivity_without_provider_should_not_snapshot(
        self, stub_transport, scheduler, settings
    ) -> None:
        tracker = EventTracker("session-1", stub_transport, scheduler, settings=settings)

        tracker.record_activity()
        scheduler.advance(5000)
        await scheduler.settle()

        assert tracker.pending_events == ()
        assert stub_transport.sent_events == []


class TestEventTrackerBatching:
    """Test suite for queueing and flush policy."""

    @pytest.mark.asyncio
    async def test_pastes_should_wait_for_batch_delay(
        self, tracker, scheduler, stub_transport
    ) -> None:
        """Test non-snapshot events flush when the oldest reaches the batch delay."""
        # Arrange
        for text in ("one", "two", "three"):
            tracker.record_paste(text, is_internal=False)

        # Act
        scheduler.advance(4999)
        await scheduler.settle()
        early = list(stub_transport.batches)
        scheduler.advance(1)
        await scheduler.settle()

        # Assert
        assert early == []
        assert len(stub_transport.batches) == 1
        assert [e["sequenceNumber"] for e in stub_transport.batches[0]] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_full_batch_should_flush_immediately(
        self, stub_transport, scheduler, sample_document
    ) -> None:
        settings = CaptureSettings(batch_size=3, batch_delay_ms=5000)
        tracker = EventTracker(
            "session-1", stub_transport, scheduler, lambda: sample_document, settings
        )

        for text in ("one", "two", "three"):
            tracker.record_paste(text, is_internal=True)
        await scheduler.settle()

        assert len(stub_transport.batches) == 1
        assert scheduler.pending_timers == 0

    @pytest.mark.asyncio
    async def test_submission_should_flush_pending_events_together(
        self, tracker, scheduler, stub_transport, sample_document
    ) -> None:
        tracker.record_paste("quoted text", is_internal=False)
        tracker.record_submission(sample_document)
        await scheduler.settle()

        assert len(stub_transport.batches) == 1
        assert [e["type"] for e in stub_transport.batches[0]] == [
            "paste_external",
            "submission",
        ]

    @pytest.mark.asyncio
    async def test_sequence_numbers_should_be_dense_and_increasing(
        self, tracker, scheduler, stub_transport, sample_document
    ) -> None:
        tracker.record_paste("a text", is_internal=False)
        tracker.record_snapshot(sample_document)
        tracker.record_paste("b text", is_internal=True)
        tracker.record_submission(sample_document)
        await scheduler.settle()

        numbers = [e["sequenceNumber"] for e in stub_transport.sent_events]
        assert numbers == [0, 1, 2, 3]
        assert tracker.next_sequence_number == 4

    @pytest.mark.asyncio
    async def test_start_sequence_should_offset_numbering(
        self, stub_transport, scheduler, settings, sample_document
    ) -> None:
        """Test a resumed session continues after the stored sequence numbers."""
        tracker = EventTracker(
            "session-1",
            stub_transport,
            scheduler,
            lambda: sample_document,
            settings,
            start_sequence=42,
        )

        event = tracker.record_snapshot(sample_document)

        assert event.sequence_number == 42
        assert tracker.next_sequence_number == 43

    @pytest.mark.asyncio
    async def test_flush_should_return_zero_on_empty_queue(
        self, tracker, stub_transport
    ) -> None:
        assert await tracker.flush() == 0
        assert stub_transport.batches == []
        assert tracker.save_status is SaveStatus.READY

    @pytest.mark.asyncio
    async def test_force_flush_should_send_queue_and_cancel_timer(
        self, tracker, scheduler, stub_transport
    ) -> None:
        tracker.record_paste("pending text", is_internal=False)

        saved = await tracker.force_flush()

        assert saved == 1
        assert scheduler.pending_timers == 0
        assert len(stub_transport.sent_events) == 1

    @pytest.mark.asyncio
    async def test_close_should_cancel_all_timers(self, tracker, scheduler) -> None:
        tracker.record_activity()
        tracker.record_paste("later", is_internal=False)

        tracker.close()

        assert scheduler.pending_timers == 0


class TestEventTrackerFailures:
    """Test suite for failed flushes."""

    @pytest.mark.asyncio
    async def test_failed_batch_should_be_requeued_in_order(
        self, failing_transport, scheduler, settings, sample_document
    ) -> None:
        """Test a rejected batch is retried intact ahead of newer events."""
        # Arrange
        tracker = EventTracker(
            "session-1", failing_transport, scheduler, lambda: sample_document, settings
        )
        tracker.record_paste("first paste", is_internal=False)
        tracker.record_snapshot(sample_document)

        # Act
        await scheduler.settle()
        requeued = [e.sequence_number for e in tracker.pending_events]
        tracker.record_paste("after failure", is_internal=True)
        scheduler.advance(5000)
        await scheduler.settle()

        # Assert
        assert requeued == [0, 1]
        assert len(failing_transport.batches) == 1
        retried = failing_transport.batches[0]
        assert [e["sequenceNumber"] for e in retried] == [0, 1, 2]
        assert [e["type"] for e in retried] == ["paste_external", "snapshot", "paste_internal"]
        assert tracker.pending_events == ()

    @pytest.mark.asyncio
    async def test_failed_flush_should_keep_saving_status(
        self, failing_transport, scheduler, settings, sample_document
    ) -> None:
        statuses: list[SaveStatus] = []
        tracker = EventTracker(
            "session-1", failing_transport, scheduler, lambda: sample_document, settings
        )
        tracker.add_listener(statuses.append)

        tracker.record_snapshot(sample_document)
        await scheduler.settle()

        assert statuses == [SaveStatus.SAVING]
        assert tracker.last_saved_count == 0
        assert scheduler.pending_timers == 1

    @pytest.mark.asyncio
    async def test_failed_flush_should_log_batch_summary_without_content(
        self, failing_transport, scheduler, settings, sample_document, caplog
    ) -> None:
        """Test the re-queue warning names event kinds, never document text."""
        tracker = EventTracker(
            "session-1", failing_transport, scheduler, lambda: sample_document, settings
        )

        with caplog.at_level(logging.WARNING, logger="prelude.core.capture.event_tracker"):
            tracker.record_snapshot(sample_document)
            await scheduler.settle()

        (record,) = [r for r in caplog.records if r.message == "Event flush failed, batch re-queued"]
        assert record.events == "events(1: snapshot x1)"
        assert record.status_code == "503"
        assert "Mitochondria" not in record.events


class TestEventTrackerListeners:
    """Test suite for save status listeners."""

    @pytest.mark.asyncio
    async def test_listener_should_receive_saving_then_saved(
        self, tracker, scheduler, sample_document
    ) -> None:
        statuses: list[SaveStatus] = []
        tracker.add_listener(statuses.append)

        tracker.record_snapshot(sample_document)
        await scheduler.settle()

        assert statuses == [SaveStatus.SAVING, SaveStatus.SAVED]

    @pytest.mark.asyncio
    async def test_failing_listener_should_not_break_flush(
        self, tracker, scheduler, stub_transport, sample_document, caplog
    ) -> None:
        """Test listener errors are logged and the save still completes."""

        def broken(_status: SaveStatus) -> None:
            raise RuntimeError("ui gone")

        tracker.add_listener(broken)

        tracker.record_snapshot(sample_document)
        await scheduler.settle()

        assert tracker.save_status is SaveStatus.SAVED
        assert len(stub_transport.sent_events) == 1
        assert "Save status listener failed" in caplog.text


@pytest.mark.asyncio
async def test_recorded_events_should_carry_payload_types(tracker) -> None:
    """Test the queue holds typed payloads, not wire dicts."""
    paste = tracker.record_paste("abc def", is_internal=True)

    assert tracker.pending_events == (paste,)
    assert paste.payload == Paste("abc def", True)
    assert paste.kind is EventKind.PASTE_INTERNAL
