"""Repository pattern implementation for database access abstraction.

Exports:
    Repository: Generic natural-key base class
    CameraRepository: Camera records keyed by camera_id
    PictureRepository: Picture records keyed by photo_id
    SyncResultRepository: Append-only sync results

Example:
    from trailsync.repositories import PictureRepository

    async with session_factory() as session:
        if not await PictureRepository(session).exists_by_key(photo_id):
            ...
"""

from trailsync.repositories.base import Repository
from trailsync.repositories.camera_repository import CameraRepository
from trailsync.repositories.picture_repository import PictureRepository
from trailsync.repositories.sync_result_repository import SyncResultRepository

__all__ = [
    "CameraRepository",
    "PictureRepository",
    "Repository",
    "SyncResultRepository",
]
