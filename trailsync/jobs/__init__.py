"""Jobs run by the trailsync entry point.

Jobs:
    - PhotoSyncJob: Mirrors Spypoint photos into object storage and PostgreSQL
"""

from .photo_sync_job import PhotoSyncJob, SyncRunReport, picture_base_path

__all__ = [
    "PhotoSyncJob",
    "SyncRunReport",
    "picture_base_path",
]
