"""
Test suite for BaseCRUD generic database operations.

Uses a mocked AsyncSession to verify the flush/refresh contract and the
result handling of each operation.

System role: Verification of generic database layer foundation
"""

import uuid
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from prelude.boundary.db.CRUD.base_crud import BaseCRUD
from prelude.boundary.db.models import StudentSessionModel


@pytest.fixture
def base_crud() -> BaseCRUD:
    """Provide BaseCRUD instance over the session table."""
    return BaseCRUD(StudentSessionModel)


@pytest.fixture
def mock_session() -> AsyncSession:
    """Provide mock async database session."""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def sample_id() -> uuid.UUID:
    return uuid.uuid4()


def scalar_result(value: Any) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=value)
    return result


class TestBaseCRUDCreate:
    """Test suite for BaseCRUD.create() method."""

    @pytest.mark.asyncio
    async def test_create_should_flush_before_refresh(
        self, base_crud: BaseCRUD, mock_session: AsyncSession
    ) -> None:
        """Test flush is called before refresh so defaults are populated."""
        # Arrange
        call_order = []

        async def flush_effect() -> None:
            call_order.append("flush")

        async def refresh_effect(obj: Any) -> None:
            call_order.append("refresh")

        mock_session.flush = AsyncMock(side_effect=flush_effect)
        mock_session.refresh = AsyncMock(side_effect=refresh_effect)

        # Act
        instance = await base_crud.create(
            mock_session, assignment_id="essay-1", student_email="ada@example.com"
        )

        # Assert
        mock_session.add.assert_called_once_with(instance)
        assert call_order == ["flush", "refresh"]
        assert instance.assignment_id == "essay-1"

    @pytest.mark.asyncio
    async def test_create_should_not_commit(
        self, base_crud: BaseCRUD, mock_session: AsyncSession
    ) -> None:
        """Test CRUD leaves transaction control to the service layer."""
        await base_crud.create(mock_session, assignment_id="essay-1", student_email="a@b.c")

        mock_session.commit.assert_not_called()


class TestBaseCRUDGetByID:
    """Test suite for BaseCRUD.get_by_id() method."""

    @pytest.mark.asyncio
    async def test_get_by_id_should_return_model_when_found(
        self, base_crud: BaseCRUD, mock_session: AsyncSession, sample_id: uuid.UUID
    ) -> None:
        # Arrange
        mock_instance = MagicMock()
        mock_instance.id = sample_id
        mock_session.execute = AsyncMock(return_value=scalar_result(mock_instance))

        # Act
        result = await base_crud.get_by_id(mock_session, sample_id)

        # Assert
        assert result == mock_instance
        mock_session.execute.assert_called_once()

    @pytest.mark.asyncio
    async def test_get_by_id_should_return_none_when_not_found(
        self, base_crud: BaseCRUD, mock_session: AsyncSession, sample_id: uuid.UUID
    ) -> None:
        mock_session.execute = AsyncMock(return_value=scalar_result(None))

        result = await base_crud.get_by_id(mock_session, sample_id)

        assert result is None


class TestBaseCRUDDeleteByID:
    """Test suite for BaseCRUD.delete_by_id() method."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rowcount, expected", [(1, True), (0, False)])
    async def test_delete_by_id_should_report_rowcount(
        self,
        base_crud: BaseCRUD,
        mock_session: AsyncSession,
        sample_id: uuid.UUID,
        rowcount: int,
        expected: bool,
    ) -> None:
        """Test delete_by_id maps the affected row count to a flag."""
        # Arrange
        mock_result = MagicMock()
        mock_result.rowcount = rowcount
        mock_session.execute = AsyncMock(return_value=mock_result)

        # Act
        result = await base_crud.delete_by_id(mock_session, sample_id)

        # Assert
        assert result is expected


class TestBaseCRUDExists:
    """Test suite for BaseCRUD.exists() method."""

    @pytest.mark.asyncio
    async def test_exists_should_return_true_when_id_found(
        self, base_crud: BaseCRUD, mock_session: AsyncSession, sample_id: uuid.UUID
    ) -> None:
        mock_session.execute = AsyncMock(return_value=scalar_result(sample_id))

        assert await base_crud.exists(mock_session, sample_id) is True

    @pytest.mark.asyncio
    async def test_exists_should_return_false_when_id_not_found(
        self, base_crud: BaseCRUD, mock_session: AsyncSession, sample_id: uuid.UUID
    ) -> None:
        mock_session.execute = AsyncMock(return_value=scalar_result(None))

        assert await base_crud.exists(mock_session, sample_id) is False

