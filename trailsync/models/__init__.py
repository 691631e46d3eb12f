"""SQLAlchemy models for synced camera data."""

from .camera import Base, Camera, parse_vendor_datetime
from .picture import Picture, new_record_id
from .sync_result import SyncResult

__all__ = [
    "Base",
    "Camera",
    "Picture",
    "SyncResult",
    "new_record_id",
    "parse_vendor_datetime",
]
