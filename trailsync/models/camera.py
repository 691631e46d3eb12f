"""Camera record synced from the Spypoint API."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

if TYPE_CHECKING:
    from trailsync.services.spypoint_schemas import SpypointCamera

CAMERA_TYPE_SPYPOINT = "spypoint"


def parse_vendor_datetime(value: str | None) -> datetime:
    """Parse an RFC 3339 vendor timestamp, falling back to the current time.

    Args:
        value: Timestamp such as "2022-01-25T14:53:00.000Z"

    Returns:
        Timezone-aware datetime (UTC when the input carries no offset)
    """
    if value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
        else:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Camera(Base):
    """Camera record keyed by the vendor camera id.

    Derived fields (registration status, photo counters, GPS as decimal
    strings) are computed from the vendor view at mapping time. The record
    is upserted on every run and never deleted by the sync job.
    """

    __tablename__ = "cameras"

    camera_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    type: Mapped[str] = mapped_column(String, nullable=False, default=CAMERA_TYPE_SPYPOINT)
    updated_by: Mapped[str] = mapped_column(String, nullable=False, default="")
    last_updated_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    registration_status: Mapped[str] = mapped_column(String, nullable=False, default="")
    created_timestamp: Mapped[str] = mapped_column(String, nullable=False, default="")
    usage: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    status_file: Mapped[str] = mapped_column(String, nullable=False, default="")
    phone_carrier: Mapped[str] = mapped_column(String, nullable=False, default="")
    account_id: Mapped[str] = mapped_column(String, nullable=False, default="")
    iccid: Mapped[str] = mapped_column(String, nullable=False, default="")
    hardware_version: Mapped[str] = mapped_column(String, nullable=False, default="")
    location: Mapped[str] = mapped_column(String, nullable=False, default="")
    firmware_version: Mapped[str] = mapped_column(String, nullable=False, default="")
    status: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    photo_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sd_card: Mapped[str] = mapped_column(String, nullable=False, default="")
    gps: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    zip: Mapped[str] = mapped_column(String, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Camera(camera_id={self.camera_id!r}, name={self.name!r})>"

    @classmethod
    def from_spypoint(cls, camera: SpypointCamera) -> Camera:
        """Map a vendor camera onto a new, unsaved Camera record.

        Args:
            camera: Camera detail from the Spypoint API

        Returns:
            A new Camera instance
        """
        last_update = parse_vendor_datetime(camera.status.last_update)

        registration_status = ""
        photo_count = 0
        if camera.subscriptions:
            subscription = camera.subscriptions[0]
            registration_status = subscription.payment_status
            photo_count = subscription.photo_count

        battery_level = camera.status.batteries[0] if camera.status.batteries else 0

        latitude = 0.0
        longitude = 0.0
        coordinates = camera.status.coordinates
        if coordinates and len(coordinates[0].position.coordinates) == 2:
            longitude, latitude = coordinates[0].position.coordinates

        return cls(
            camera_id=camera.id,
            name=camera.config.name,
            type=CAMERA_TYPE_SPYPOINT,
            updated_by="",
            last_updated_timestamp=last_update,
            registration_status=registration_status,
            created_timestamp=camera.activation_date,
            usage={"stored_photos": photo_count, "photos": photo_count},
            status_file="",
            phone_carrier="",
            account_id=camera.user,
            iccid=camera.ucid,
            hardware_version=camera.status.version,
            location=camera.config.name,
            firmware_version=camera.status.modem_firmware,
            status={
                "last_transmission_timestamp": 0,
                "last_transmission": last_update.isoformat(),
                "memory": float(camera.status.memory.used),
                "temperature": float(camera.status.temperature.value),
                "memory_limit": float(camera.status.memory.size),
                "signal": camera.status.signal.processed.bar,
                "battery_level": battery_level,
            },
            photo_count=photo_count,
            sd_card="",
            gps={
                "last_updated_timestamp": last_update.isoformat(),
                "latitude": str(latitude),
                "longitude": str(longitude),
            },
            zip="",
        )
