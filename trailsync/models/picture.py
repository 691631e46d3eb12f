"""Picture record for a photo uploaded to object storage."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .camera import Base, parse_vendor_datetime

if TYPE_CHECKING:
    from trailsync.services.spypoint_schemas import SpypointPhoto


def new_record_id() -> str:
    """Allocate a record identity for a picture about to be uploaded."""
    return uuid.uuid4().hex


class Picture(Base):
    """Picture model keyed by the vendor photo id.

    A row is only written after the full image and its thumbnail are in
    object storage, so an existing row implies existing assets. Weather data
    is an enrichment slot that the sync job never fills.
    """

    __tablename__ = "pictures"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    photo_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[str] = mapped_column(String, nullable=False, default="")
    bucket: Mapped[str] = mapped_column(String, nullable=False, default="")
    path: Mapped[str] = mapped_column(String, nullable=False, default="")
    thumb_path: Mapped[str] = mapped_column(String, nullable=False, default="")
    camera_id: Mapped[str] = mapped_column(String, nullable=False)
    picture_date: Mapped[str] = mapped_column(String, nullable=False, default="")
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    account_id: Mapped[str] = mapped_column(String, nullable=False, default="")
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    photo_time_stamp: Mapped[str] = mapped_column(String, nullable=False, default="")
    photo_url: Mapped[str] = mapped_column(String, nullable=False, default="")
    weather_data: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)

    __table_args__ = (
        Index("idx_pictures_camera_id", "camera_id"),
        Index("idx_pictures_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<Picture(id={self.id!r}, photo_id={self.photo_id!r}, camera_id={self.camera_id!r})>"

    @classmethod
    def from_spypoint(cls, photo: SpypointPhoto) -> Picture:
        """Map a vendor photo onto an unsaved Picture draft.

        The record identity, storage paths and account are filled in by the
        sync job during the upload sequence.
        """
        picture_date = parse_vendor_datetime(photo.origin_date)
        return cls(
            id=None,
            photo_id=photo.id,
            date=picture_date,
            location="",
            bucket="",
            path="",
            thumb_path="",
            camera_id=photo.camera,
            picture_date=photo.date,
            is_favorite=False,
            account_id="",
            last_updated=picture_date,
            created=picture_date,
            photo_time_stamp=photo.origin_date,
            photo_url=photo.large.url,
            weather_data=None,
        )
