"""Repository for Camera records.

Example:
    async with session_factory() as session:
        repo = CameraRepository(session)
        await repo.upsert_by_key(Camera.from_spypoint(vendor_camera))
"""

from __future__ import annotations

from trailsync.models import Camera
from trailsync.repositories.base import Repository


class CameraRepository(Repository[Camera]):
    """Camera records keyed by the vendor camera id."""

    model_class = Camera
    key_field = "camera_id"
