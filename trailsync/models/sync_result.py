"""Per-camera summary of a sync run."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .camera import Base


class SyncResult(Base):
    """Append-only outcome of one camera in one sync run."""

    __tablename__ = "sync"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    camera_id: Mapped[str] = mapped_column(String, nullable=False)
    camera_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    location: Mapped[str] = mapped_column(String, nullable=False, default="")
    uploaded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    errors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (Index("idx_sync_camera_date", "camera_id", "date"),)

    def __repr__(self) -> str:
        return (
            f"<SyncResult(camera_id={self.camera_id!r}, uploaded={self.uploaded}, "
            f"skipped={self.skipped}, errors={self.errors})>"
        )

    @classmethod
    def start(cls, camera_id: str) -> SyncResult:
        """Create a zeroed accumulator for a camera."""
        return cls(
            date=datetime.now(UTC),
            camera_id=camera_id,
            camera_name="",
            location="",
            uploaded=0,
            skipped=0,
            errors=0,
        )
