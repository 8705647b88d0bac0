"""
Integration tests for editor event persistence.

Runs EditorEventCRUD and EventService against in-memory SQLite: batch
appends, redelivery handling, empty batches and last-saved bookkeeping.

System role: Verification of the persistence endpoint's storage path
"""

import uuid

import pytest

from prelude.application.services import EventService, SessionService
from prelude.boundary.db.CRUD import editor_event_crud, student_session_crud
from prelude.core.events import EditorEvent, EventKind, Paste, Snapshot, Submission
from prelude.core.exceptions import SessionNotFoundError, ValidationError
from prelude.models.events import WireEvent


@pytest.fixture
async def session_id(test_async_db) -> uuid.UUID:
    started = await SessionService(test_async_db).start_session(
        "assignment-1", "student@example.com", "Student"
    )
    return started["session_id"]


def wire(kind: str, timestamp: int, sequence_number: int, data) -> WireEvent:
    return WireEvent(type=kind, timestamp=timestamp, sequence_number=sequence_number, data=data)


class TestEditorEventCRUD:
    """Test suite for EditorEventCRUD."""

    @pytest.mark.asyncio
    async def test_append_batch_should_store_events_in_order(
        self, test_async_db, session_id, sample_document
    ) -> None:
        """Test rows keep kind, payload, timestamp and sequence number."""
        # Arrange
        events = [
            EditorEvent(Snapshot(sample_document), 1_000, 0),
            EditorEvent(Paste("pasted words", False), 2_000, 1),
            EditorEvent(Submission(sample_document), 3_000, 2),
        ]

        # Act
        inserted = await editor_event_crud.append_batch(test_async_db, session_id, events)
        rows = await editor_event_crud.list_by_session(test_async_db, session_id)

        # Assert
        assert inserted == 3
        assert [row.sequence_number for row in rows] == [0, 1, 2]
        assert [row.event_type for row in rows] == [
            EventKind.SNAPSHOT,
            EventKind.PASTE_EXTERNAL,
            EventKind.SUBMISSION,
        ]
        assert rows[0].event_data == sample_document
        assert rows[1].event_data == {"content": "pasted words"}

    @pytest.mark.asyncio
    async def test_append_batch_should_skip_redelivered_sequence_numbers(
        self, test_async_db, session_id, sample_document
    ) -> None:
        """Test a retried batch never duplicates stored sequence numbers."""
        first = [EditorEvent(Snapshot(sample_document), 1_000, 0)]
        retry = [
            EditorEvent(Snapshot(sample_document), 1_000, 0),
            EditorEvent(Paste("abc text", True), 1_500, 1),
            EditorEvent(Paste("abc text", True), 1_500, 1),
        ]

        await editor_event_crud.append_batch(test_async_db, session_id, first)
        inserted = await editor_event_crud.append_batch(test_async_db, session_id, retry)
        rows = await editor_event_crud.list_by_session(test_async_db, session_id)

        assert inserted == 1
        assert [row.sequence_number for row in rows] == [0, 1]

    @pytest.mark.asyncio
    async def test_list_by_session_should_filter_by_kind(
        self, test_async_db, session_id, sample_document
    ) -> None:
        events = [
            EditorEvent(Submission(sample_document), 2_000, 1),
            EditorEvent(Snapshot(sample_document), 1_000, 0),
        ]
        await editor_event_crud.append_batch(test_async_db, session_id, events)

        submissions = await editor_event_crud.list_submissions(test_async_db, session_id)

        assert [row.sequence_number for row in submissions] == [1]

    @pytest.mark.asyncio
    async def test_max_sequence_number_should_be_none_for_empty_log(
        self, test_async_db, session_id
    ) -> None:
        assert await editor_event_crud.max_sequence_number(test_async_db, session_id) is None


class TestEventServiceSaveEvents:
    """Test suite for EventService.save_events()."""

    @pytest.mark.asyncio
    async def test_save_events_should_persist_and_touch_last_saved(
        self, test_async_db, session_id, sample_document
    ) -> None:
        # Arrange
        service = EventService(test_async_db)
        batch = [
            wire("snapshot", 1_000, 0, sample_document),
            wire("paste_internal", 1_200, 1, {"content": "from assistant"}),
        ]

        # Act
        saved = await service.save_events(session_id, batch)

        # Assert
        assert saved == 2
        session = await student_session_crud.get_by_id(test_async_db, session_id)
        await test_async_db.refresh(session)
        assert session.last_saved_at is not None
        assert await editor_event_crud.max_sequence_number(test_async_db, session_id) == 1

    @pytest.mark.asyncio
    async def test_save_events_should_ignore_empty_batch(
        self, test_async_db, session_id
    ) -> None:
        """Test an empty batch leaves the session untouched."""
        saved = await EventService(test_async_db).save_events(session_id, [])

        session = await student_session_crud.get_by_id(test_async_db, session_id)
        await test_async_db.refresh(session)
        assert saved == 0
        assert session.last_saved_at is None

    @pytest.mark.asyncio
    async def test_save_events_should_keep_sequence_numbers_unique(
        self, test_async_db, session_id, sample_document
    ) -> None:
        service = EventService(test_async_db)
        batch = [wire("snapshot", 1_000, n, sample_document) for n in range(3)]

        await service.save_events(session_id, batch)
        await service.save_events(session_id, batch + [wire("snapshot", 2_000, 3, [])])
        rows = await editor_event_crud.list_by_session(test_async_db, session_id)

        numbers = [row.sequence_number for row in rows]
        assert numbers == [0, 1, 2, 3]
        assert len(set(numbers)) == len(numbers)

    @pytest.mark.asyncio
    async def test_save_events_should_reject_unknown_session(self, test_async_db) -> None:
        with pytest.raises(SessionNotFoundError):
            await EventService(test_async_db).save_events(uuid.uuid4(), [])

    @pytest.mark.asyncio
    async def test_save_events_should_store_nothing_for_malformed_batch(
        self, test_async_db, session_id, sample_document
    ) -> None:
        """Test one bad paste payload rejects the whole batch."""
        batch = [
            wire("snapshot", 1_000, 0, sample_document),
            wire("paste_external", 1_100, 1, {"text": "no content key"}),
        ]

        with pytest.raises(ValidationError) as exc_info:
            await EventService(test_async_db).save_events(session_id, batch)

        assert exc_info.value.details["field"] == "events[1]"
        assert await editor_event_crud.list_by_session(test_async_db, session_id) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ["snapshot", "submission"])
    @pytest.mark.parametrize(
        "data", [{"blocks": [{"type": "paragraph", "text": "hello"}]}, "hello", None]
    )
    async def test_save_events_should_reject_document_that_is_not_a_block_sequence(
        self, test_async_db, session_id, kind, data
    ) -> None:
        """Test a document payload is stored as sent or not at all."""
        # Arrange
        service = EventService(test_async_db)

        # Act
        with pytest.raises(ValidationError) as exc_info:
            await service.save_events(session_id, [wire(kind, 1_000, 0, data)])

        # Assert
        assert exc_info.value.details["field"] == "events[0]"
        assert exc_info.value.details["kind"] == kind
        assert await editor_event_crud.list_by_session(test_async_db, session_id) == []

    @pytest.mark.asyncio
    async def test_list_submissions_should_require_session(self, test_async_db) -> None:
        with pytest.raises(SessionNotFoundError):
            await EventService(test_async_db).list_submissions(uuid.uuid4())
