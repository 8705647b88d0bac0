"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory SQLite async database, sample block documents, a stub
capture transport
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from prelude.boundary.db.connection import (
    create_tables,
    drop_tables,
    enable_sqlite_foreign_keys,
)
from prelude.core.exceptions import FlushError


def make_document(*paragraphs: str) -> list[dict[str, Any]]:
    """Build an editor block sequence with one paragraph per argument."""
    return [
        {
            "id": f"block-{index}",
            "type": "paragraph",
            "props": {"textColor": "default"},
            "content": [{"type": "text", "text": text, "styles": {}}],
            "children": [],
        }
        for index, text in enumerate(paragraphs)
    ]


class StubTransport:
    """
    In-memory EventTransport recording every batch it receives.

    ``failures`` is the number of upcoming sends that raise FlushError.
    """

    def __init__(self, failures: int = 0) -> None:
        self.batches: list[list[dict[str, Any]]] = []
        self.failures = failures
        self.closed = False

    async def send(self, session_id: str, events: list[dict[str, Any]]) -> int:
        if self.failures > 0:
            self.failures -= 1
            raise FlushError("Event save rejected by server", status_code=503)
        self.batches.append(list(events))
        return len(events)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def sent_events(self) -> list[dict[str, Any]]:
        return [event for batch in self.batches for event in batch]


@pytest.fixture
def sample_document() -> list[dict[str, Any]]:
    """Two-paragraph document."""
    return make_document("The cell has many parts.", "Mitochondria make energy.")


@pytest.fixture
def stub_transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def failing_transport() -> StubTransport:
    """Transport whose next send fails."""
    return StubTransport(failures=1)


@pytest.fixture
def document_factory():
    return make_document


@pytest.fixture
async def sqlite_engine():
    """
    In-memory SQLite engine with the full schema.

    Yields:
        AsyncEngine: Engine with foreign keys enforced
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    await create_tables(engine)

    yield engine

    await drop_tables(engine)
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        sqlite_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_async_db(session_factory):
    """
    Create in-memory SQLite async database session for testing.

    Yields:
        AsyncSession: Test database session
    """
    async with session_factory() as session:
        yield session
        await session.rollback()
