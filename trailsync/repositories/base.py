"""Generic natural-key Repository base class.

This module provides an async repository that works with SQLAlchemy 2.0
models whose identity, as far as the sync job is concerned, is a business
key (``camera_id``, ``photo_id``) rather than the row's primary key.

Example:
    from trailsync.repositories import Repository
    from trailsync.models import Camera

    class CameraRepository(Repository[Camera]):
        model_class = Camera
        key_field = "camera_id"
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert

from trailsync.core.exceptions import RecordStoreError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from trailsync.models.camera import Base

T = TypeVar("T", bound="Base")


class Repository(Generic[T]):  # noqa: UP046
    """Generic repository providing natural-key upsert and lookup.

    Attributes:
        model_class: The SQLAlchemy model class this repository manages.
        key_field: Name of the unique natural-key column used for upserts
            and existence checks. None for append-only records.
        session: The async database session used for all operations.
    """

    model_class: type[T]
    key_field: str | None = None

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @property
    def collection(self) -> str:
        """Name of the backing table."""
        return self.model_class.__tablename__

    def _key_column(self) -> Any:
        if self.key_field is None:
            raise TypeError(f"{type(self).__name__} has no natural key")
        return self.model_class.__table__.columns[self.key_field]

    def _column_values(self, entity: T) -> dict[str, Any]:
        """Build a column -> value dictionary from an entity, skipping unset values."""
        values: dict[str, Any] = {}
        for column in self.model_class.__table__.columns:
            value = getattr(entity, column.name, None)
            if value is not None:
                values[column.name] = value
        return values

    async def exists_by_key(self, key_value: Any) -> bool:
        """Check whether an entity with the given natural key exists."""
        stmt = (
            select(func.count())
            .select_from(self.model_class)
            .where(self._key_column() == key_value)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def upsert_by_key(self, entity: T) -> T:
        """Insert the entity, or update the existing row with the same natural key.

        Uses PostgreSQL's INSERT ... ON CONFLICT (<key>) DO UPDATE so that a
        second save of the same key never creates a duplicate. Primary key
        columns of an existing row are left untouched.

        Args:
            entity: The entity to save.

        Returns:
            The saved entity as stored in the database.
        """
        key_column = self._key_column()
        entity_data = self._column_values(entity)
        if entity_data.get(key_column.name) in (None, ""):
            raise RecordStoreError(
                f"Cannot upsert {self.collection} without {key_column.name}",
                collection=self.collection,
            )

        pk_names = {col.name for col in self.model_class.__table__.primary_key.columns}
        update_columns = {
            name: value
            for name, value in entity_data.items()
            if name != key_column.name and name not in pk_names
        }

        insert_stmt = pg_insert(self.model_class).values(**entity_data)
        if update_columns:
            insert_stmt = insert_stmt.on_conflict_do_update(
                index_elements=[key_column.name],
                set_=update_columns,
            )
        else:
            insert_stmt = insert_stmt.on_conflict_do_nothing(index_elements=[key_column.name])

        result = await self.session.execute(insert_stmt.returning(self.model_class))
        saved: T | None = result.scalar_one_or_none()
        await self.session.flush()
        return saved if saved is not None else entity

    async def insert(self, entity: T) -> T:
        """Insert a new entity.

        Used for append-only records. The entity is flushed so database
        defaults (auto-increment ids) are populated.
        """
        self.session.add(entity)
        await self.session.flush()
        return entity
