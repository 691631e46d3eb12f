"""Record store facade over the PostgreSQL repositories.

Each operation runs in its own session that is committed on success, so a
failure on one picture never rolls back records written for earlier ones.
Database errors surface as RecordStoreError.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trailsync.core.exceptions import RecordStoreError
from trailsync.core.logging import get_logger, sanitize_error
from trailsync.models import Camera, Picture, SyncResult
from trailsync.repositories import CameraRepository, PictureRepository, SyncResultRepository

logger = get_logger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class RecordStore:
    """Camera, picture and sync result persistence for the sync job."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | SessionFactory) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, collection: str, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except SQLAlchemyError as e:
            raise RecordStoreError(
                f"{operation} on {collection} failed: {sanitize_error(e)}",
                collection=collection,
                original_error=e,
            ) from e

    async def ping(self) -> None:
        """Verify connectivity.

        Raises:
            RecordStoreError: If the database cannot be reached
        """
        async with self._session("database", "ping") as session:
            await session.execute(text("SELECT 1"))

    async def upsert_camera(self, camera: Camera) -> Camera:
        async with self._session(Camera.__tablename__, "upsert") as session:
            return await CameraRepository(session).upsert_by_key(camera)

    async def picture_exists(self, photo_id: str) -> bool:
        async with self._session(Picture.__tablename__, "exists") as session:
            return await PictureRepository(session).exists_by_key(photo_id)

    async def upsert_picture(self, picture: Picture) -> Picture:
        async with self._session(Picture.__tablename__, "upsert") as session:
            return await PictureRepository(session).upsert_by_key(picture)

    async def insert_sync_result(self, result: SyncResult) -> SyncResult:
        async with self._session(SyncResult.__tablename__, "insert") as session:
            return await SyncResultRepository(session).insert(result)
