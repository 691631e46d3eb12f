"""Photo sync job: mirrors Spypoint camera photos into storage and the database.

The job:
1. Authenticates against the Spypoint API (fatal on failure)
2. Lists the account's cameras (fatal on failure)
3. For each camera, sequentially:
   - refreshes the camera record from its detail
   - lists the newest photos
   - skips photos outside the recency window or already stored
   - downloads, thumbnails and uploads new photos, then saves the record
   - appends a per-camera sync result
4. Logs and posts a run summary

Failure containment:
    - Camera detail, camera save and photo listing failures skip the camera
    - Photos without an id are counted as errors and skipped
    - Download, thumbnail, upload and picture save failures skip the photo
    - Existence checks, notifications and sync result inserts never abort

A picture record is only written after both of its objects are stored, so
a photo that failed midway is retried on the next run.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol

from trailsync.core.exceptions import SyncAbortedError, TrailSyncError, ValidationError
from trailsync.core.logging import get_logger, sanitize_error, set_run_id
from trailsync.models import Camera, Picture, SyncResult, new_record_id
from trailsync.services.object_storage import MIME_JPEG
from trailsync.services.spypoint_schemas import FAR_FUTURE_DATE_END, SpypointCredentials
from trailsync.services.thumbnail_generator import make_thumbnail

if TYPE_CHECKING:
    from trailsync.core.config import Settings
    from trailsync.services.notification import SlackNotifier
    from trailsync.services.object_storage import ObjectStorage
    from trailsync.services.record_store import RecordStore
    from trailsync.services.spypoint_client import SpypointClient, SpypointSession
    from trailsync.services.spypoint_schemas import SpypointCamera, SpypointPhoto

logger = get_logger(__name__)

NOTIFY_TITLE_SPYPOINT = "Spypoint"
NOTIFY_TITLE_STORAGE = "Storage"
NOTIFY_TITLE_DATABASE = "Database"
NOTIFY_TITLE_SYNC = "Sync"


class Thumbnailer(Protocol):
    def __call__(self, data: bytes, width: int, height: int) -> bytes: ...


def picture_base_path(camera_name: str, created: datetime) -> str:
    """Storage prefix for a picture: ``locations/<camera>/<month>-<year>``.

    The month is not zero padded.
    """
    return f"locations/{camera_name}/{created.month}-{created.year}"


@dataclass
class SyncRunReport:
    """Outcome of one sync run.

    Attributes:
        run_id: Identifier stamped on every log record of the run
        started_at: Run start time
        finished_at: Run end time
        cameras_seen: Cameras returned by the camera listing
        cameras_processed: Cameras whose photo listing succeeded
        errors: Camera-level failures (detail fetch or camera save)
        results: Per-camera accumulators, in processing order
    """

    run_id: str
    started_at: datetime
    finished_at: datetime | None = None
    cameras_seen: int = 0
    cameras_processed: int = 0
    errors: int = 0
    results: list[SyncResult] = field(default_factory=list)

    @property
    def uploaded(self) -> int:
        return sum(r.uploaded for r in self.results)

    @property
    def skipped(self) -> int:
        return sum(r.skipped for r in self.results)

    @property
    def total_errors(self) -> int:
        """Camera-level failures plus every per-camera error count."""
        return self.errors + sum(r.errors for r in self.results)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "cameras_seen": self.cameras_seen,
            "cameras_processed": self.cameras_processed,
            "uploaded": self.uploaded,
            "skipped": self.skipped,
            "errors": self.total_errors,
            "duration_seconds": round(self.duration_seconds, 2),
        }

    def summary_message(self) -> str:
        return (
            f"sync {self.run_id}: {self.cameras_processed}/{self.cameras_seen} cameras, "
            f"{self.uploaded} uploaded, {self.skipped} skipped, {self.total_errors} errors"
        )


class PhotoSyncJob:
    """Single pass over every camera of the Spypoint account.

    Collaborators are injected so tests can run the whole pipeline against
    in-memory fakes.
    """

    def __init__(
        self,
        settings: Settings,
        client: SpypointClient,
        storage: ObjectStorage,
        records: RecordStore,
        notifier: SlackNotifier,
        *,
        thumbnailer: Thumbnailer = make_thumbnail,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings
        self.client = client
        self.storage = storage
        self.records = records
        self.notifier = notifier
        self._thumbnailer = thumbnailer
        self._sleep = sleep
        self._clock = clock or (lambda: datetime.now(UTC))

    async def run(self) -> SyncRunReport:
        """Run one sync pass.

        Returns:
            SyncRunReport with per-camera counters

        Raises:
            SyncAbortedError: If login or camera enumeration failed
        """
        run_id = uuid.uuid4().hex[:12]
        set_run_id(run_id)
        report = SyncRunReport(run_id=run_id, started_at=self._clock())
        logger.info("Starting photo sync", extra={"sync_days": self.settings.sync_days})

        try:
            session = await self._login()
            cameras = await self._list_cameras(session)
            report.cameras_seen = len(cameras)

            for vendor_camera in cameras:
                await self._sync_camera(session, vendor_camera.id, report)

            report.finished_at = self._clock()
            logger.info(
                f"Photo sync finished with {report.total_errors} errors",
                extra=report.to_dict(),
            )
            await self.notifier.post_message(report.summary_message())
            return report
        finally:
            set_run_id(None)

    async def _login(self) -> SpypointSession:
        credentials = SpypointCredentials(
            username=self.settings.spypoint_user,
            password=self.settings.spypoint_pwd,
        )
        try:
            return await self.client.login(credentials)
        except TrailSyncError as e:
            await self._report_failure(NOTIFY_TITLE_SPYPOINT, "Spypoint login failed", e)
            raise SyncAbortedError(
                f"Spypoint login failed: {e.message}", stage="login", original_error=e
            ) from e

    async def _list_cameras(self, session: SpypointSession) -> list[SpypointCamera]:
        try:
            return await self.client.list_cameras(session)
        except TrailSyncError as e:
            await self._report_failure(NOTIFY_TITLE_SPYPOINT, "Listing Spypoint cameras failed", e)
            raise SyncAbortedError(
                f"Listing cameras failed: {e.message}", stage="list_cameras", original_error=e
            ) from e

    async def _sync_camera(
        self,
        session: SpypointSession,
        camera_id: str,
        report: SyncRunReport,
    ) -> None:
        result = SyncResult.start(camera_id)
        report.results.append(result)

        try:
            vendor_camera = await self.client.get_camera(session, camera_id)
        except TrailSyncError as e:
            report.errors += 1
            await self._report_failure(
                NOTIFY_TITLE_SPYPOINT, f"Fetching camera {camera_id} failed", e
            )
            await self._record_partial(result)
            return

        camera = Camera.from_spypoint(vendor_camera)
        result.camera_name = camera.name
        result.location = camera.location

        try:
            await self.records.upsert_camera(camera)
        except TrailSyncError as e:
            report.errors += 1
            await self._report_failure(NOTIFY_TITLE_DATABASE, f"Saving camera {camera_id} failed", e)
            await self._record_partial(result)
            return

        if self.settings.camera_pacing_seconds > 0:
            await self._sleep(self.settings.camera_pacing_seconds)

        try:
            batch = await self.client.list_photos(
                session,
                camera_id,
                limit=self.settings.photo_limit,
                date_end=FAR_FUTURE_DATE_END,
            )
        except TrailSyncError as e:
            result.errors += 1
            await self._report_failure(
                NOTIFY_TITLE_SPYPOINT, f"Listing photos of camera {camera_id} failed", e
            )
            await self._record_partial(result)
            return

        report.cameras_processed += 1
        logger.info(
            f"Camera {camera.name or camera_id} returned {len(batch.photos)} photos",
            extra={"camera_id": camera_id, "photo_count": len(batch.photos)},
        )

        cutoff = self._recency_cutoff()
        for photo in batch.photos:
            await self._sync_photo(photo, camera, result, cutoff)

        await self._save_result(result)

    async def _sync_photo(
        self,
        photo: SpypointPhoto,
        camera: Camera,
        result: SyncResult,
        cutoff: datetime | None,
    ) -> None:
        if not photo.id:
            result.errors += 1
            await self._report_failure(
                NOTIFY_TITLE_SPYPOINT,
                f"Skipping photo from camera {camera.camera_id}",
                ValidationError(
                    "Spypoint photo has no id", details={"camera_id": camera.camera_id}
                ),
            )
            return

        picture = Picture.from_spypoint(photo)

        if cutoff is not None and picture.created < cutoff:
            result.skipped += 1
            logger.debug(
                f"Skipping photo {photo.id} older than recency window",
                extra={"camera_id": camera.camera_id, "photo_id": photo.id},
            )
            return

        if await self._picture_exists(photo.id):
            result.skipped += 1
            return

        picture.account_id = camera.account_id
        picture.location = camera.location

        try:
            await self._upload_picture(picture, camera.name)
        except TrailSyncError as e:
            result.errors += 1
            title = _notify_title_for(e)
            await self._report_failure(title, f"Uploading photo {photo.id} failed", e)
            return

        result.uploaded += 1
        if self.settings.photo_pacing_seconds > 0:
            await self._sleep(self.settings.photo_pacing_seconds)

    async def _upload_picture(self, picture: Picture, camera_name: str) -> None:
        """Download, store and record one picture.

        Steps run in order and the first failure stops the sequence, so the
        record is only saved once both objects exist.
        """
        image = await self.client.download_photo(picture.photo_url)

        picture.id = new_record_id()
        base_path = picture_base_path(camera_name, picture.created)
        picture.bucket = self.settings.gcp_bucket
        picture.path = f"{base_path}/{picture.id}.jpg"
        picture.thumb_path = f"{base_path}/{picture.id}-thumb.jpg"

        await self.storage.put(picture.bucket, picture.path, image, MIME_JPEG)

        thumbnail = await asyncio.to_thread(
            self._thumbnailer,
            image,
            self.settings.thumbnail_width,
            self.settings.thumbnail_height,
        )
        await self.storage.put(picture.bucket, picture.thumb_path, thumbnail, MIME_JPEG)

        await self.records.upsert_picture(picture)
        logger.debug(
            f"Uploaded photo {picture.photo_id}",
            extra={"photo_id": picture.photo_id, "path": picture.path},
        )

    async def _picture_exists(self, photo_id: str) -> bool:
        try:
            return await self.records.picture_exists(photo_id)
        except TrailSyncError as e:
            logger.warning(
                f"Existence check for photo {photo_id} failed, treating as new: "
                f"{sanitize_error(e)}",
                extra={"photo_id": photo_id},
            )
            return False

    def _recency_cutoff(self) -> datetime | None:
        if self.settings.sync_days <= 0:
            return None
        return self._clock() - timedelta(days=self.settings.sync_days)

    async def _record_partial(self, result: SyncResult) -> None:
        if self.settings.record_partial_sync_results:
            await self._save_result(result)

    async def _save_result(self, result: SyncResult) -> None:
        try:
            await self.records.insert_sync_result(result)
        except TrailSyncError as e:
            await self._report_failure(
                NOTIFY_TITLE_DATABASE,
                f"Saving sync result for camera {result.camera_id} failed",
                e,
            )

    async def _report_failure(self, title: str, context: str, error: Exception) -> None:
        message = f"{context}: {sanitize_error(error)}"
        logger.error(message, extra=_error_extra(error))
        await self.notifier.post_error(title, message)


def _notify_title_for(error: TrailSyncError) -> str:
    service = getattr(error, "service_name", None)
    if service == "spypoint":
        return NOTIFY_TITLE_SPYPOINT
    if service == "object_storage":
        return NOTIFY_TITLE_STORAGE
    if service == "postgresql":
        return NOTIFY_TITLE_DATABASE
    return NOTIFY_TITLE_SYNC


def _error_extra(error: Exception) -> dict[str, Any]:
    if isinstance(error, TrailSyncError):
        return {"error_code": error.error_code, **error.details}
    return {"error_type": type(error).__name__}
