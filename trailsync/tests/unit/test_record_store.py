"""Unit tests for the RecordStore facade."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from trailsync.core.exceptions import RecordStoreError
from trailsync.models import Camera, SyncResult
from trailsync.services.record_store import RecordStore


@pytest.fixture
def mock_session():
    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    result = MagicMock()
    result.scalar_one.return_value = 0
    result.scalar_one_or_none.return_value = None
    session.execute = AsyncMock(return_value=result)
    return session


@pytest.fixture
def session_factory(mock_session):
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=mock_session)
    context.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=context)


@pytest.fixture
def store(session_factory):
    return RecordStore(session_factory)


@pytest.mark.asyncio
async def test_ping_commits(store, mock_session):
    await store.ping()

    mock_session.execute.assert_awaited_once()
    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_picture_exists(store, mock_session):
    mock_session.execute.return_value.scalar_one.return_value = 1

    assert await store.picture_exists("p1") is True


@pytest.mark.asyncio
async def test_each_operation_uses_own_session(store, session_factory):
    await store.picture_exists("p1")
    await store.picture_exists("p2")

    assert session_factory.call_count == 2


@pytest.mark.asyncio
async def test_upsert_camera_commits(store, mock_session):
    camera = Camera(camera_id="c1", name="Clover Field", last_updated_timestamp=datetime.now(UTC))

    await store.upsert_camera(camera)

    mock_session.commit.assert_awaited_once()
    mock_session.rollback.assert_not_called()


@pytest.mark.asyncio
async def test_insert_sync_result(store, mock_session):
    result = SyncResult.start("c1")

    assert await store.insert_sync_result(result) is result
    mock_session.add.assert_called_once_with(result)


@pytest.mark.asyncio
async def test_database_error_rolls_back_and_wraps(store, mock_session):
    error = OperationalError("SELECT 1", {}, Exception("connection reset"))
    mock_session.execute.side_effect = error

    with pytest.raises(RecordStoreError) as exc_info:
        await store.picture_exists("p1")

    mock_session.rollback.assert_awaited_once()
    mock_session.commit.assert_not_called()
    assert exc_info.value.details["collection"] == "pictures"
    assert exc_info.value.original_error is error


@pytest.mark.asyncio
async def test_commit_failure_is_wrapped(store, mock_session):
    mock_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("gone"))

    with pytest.raises(RecordStoreError):
        await store.insert_sync_result(SyncResult.start("c1"))


@pytest.mark.asyncio
async def test_camera_without_id_raises_record_store_error(store, mock_session):
    with pytest.raises(RecordStoreError, match="camera_id") as exc_info:
        await store.upsert_camera(Camera(camera_id="", name="x"))

    assert exc_info.value.service_name == "postgresql"
    mock_session.rollback.assert_awaited_once()
    mock_session.execute.assert_not_called()
