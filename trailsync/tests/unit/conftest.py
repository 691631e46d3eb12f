"""Unit test configuration and fixtures.

This module provides in-memory fakes for the sync job's collaborators:
- FakeSpypointClient: Serves vendor cameras, photo batches and images
- FakeObjectStorage: Records uploaded objects
- FakeRecordStore: Dictionaries keyed like the database's natural keys
- FakeNotifier: Collects posted errors and messages

Each fake can be told to fail a named operation via its ``fail`` dict.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest

from trailsync.core.exceptions import RecordStoreError
from trailsync.jobs import PhotoSyncJob
from trailsync.models import Camera, Picture, SyncResult
from trailsync.services.notification import NotificationDelivery
from trailsync.services.object_storage import StoredObject
from trailsync.services.spypoint_client import SpypointSession
from trailsync.services.spypoint_schemas import (
    SpypointCamera,
    SpypointPhoto,
    SpypointPhotoBatch,
)

FIXED_NOW = datetime(2024, 7, 18, 12, 0, tzinfo=UTC)


def vendor_camera(camera_id: str, name: str, user: str = "account-1") -> SpypointCamera:
    return SpypointCamera.model_validate(
        {
            "id": camera_id,
            "activationDate": "2024-07-17T23:43:19.162Z",
            "config": {"name": name},
            "status": {
                "lastUpdate": "2024-07-17T19:52:21.000Z",
                "batteries": [90],
                "memory": {"size": 29798, "used": 12},
                "temperature": {"unit": "F", "value": 70},
            },
            "ucid": f"ucid-{camera_id}",
            "user": user,
            "subscriptions": [{"paymentStatus": "active", "photoCount": 3}],
        }
    )


def vendor_photo(photo_id: str, camera_id: str, origin_date: str) -> SpypointPhoto:
    return SpypointPhoto.model_validate(
        {
            "id": photo_id,
            "camera": camera_id,
            "date": origin_date,
            "originDate": origin_date,
            "originName": f"{photo_id}.JPG",
            "originSize": 16483,
            "tag": ["day"],
            "large": {
                "verb": "GET",
                "host": "s3.test",
                "path": f"{camera_id}/{photo_id}.jpg",
                "headers": [{"name": "Content-Type", "value": "image/jpeg"}],
            },
        }
    )


class _Failing:
    def __init__(self) -> None:
        self.fail: dict[str, Exception] = {}

    def _maybe_fail(self, *keys: str) -> None:
        for key in keys:
            if key in self.fail:
                raise self.fail[key]


class FakeSpypointClient(_Failing):
    """Failure keys: login, list_cameras, get_camera:<id>, list_photos:<id>, download:<url>."""

    def __init__(self) -> None:
        super().__init__()
        self.cameras: dict[str, SpypointCamera] = {}
        self.batches: dict[str, SpypointPhotoBatch] = {}
        self.images: dict[str, bytes] = {}
        self.calls: list[tuple[str, Any]] = []

    async def login(self, credentials):
        self.calls.append(("login", credentials.username))
        self._maybe_fail("login")
        return SpypointSession(token="test-token", uuid="test-uuid")

    async def list_cameras(self, session):
        self.calls.append(("list_cameras", None))
        self._maybe_fail("list_cameras")
        return list(self.cameras.values())

    async def get_camera(self, session, camera_id):
        self.calls.append(("get_camera", camera_id))
        self._maybe_fail(f"get_camera:{camera_id}")
        return self.cameras[camera_id]

    async def list_photos(self, session, camera_id, limit=125, date_end=None):
        self.calls.append(("list_photos", (camera_id, limit, date_end)))
        self._maybe_fail(f"list_photos:{camera_id}")
        return self.batches.get(camera_id, SpypointPhotoBatch())

    async def download_photo(self, url):
        self.calls.append(("download", url))
        self._maybe_fail(f"download:{url}")
        return self.images[url]

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


class FakeObjectStorage(_Failing):
    """Failure keys: any object path."""

    def __init__(self) -> None:
        super().__init__()
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.put_paths: list[str] = []

    async def put(self, bucket, path, data, content_type="image/jpeg"):
        self.put_paths.append(path)
        self._maybe_fail(path)
        self.objects[(bucket, path)] = (data, content_type)
        return StoredObject(bucket=bucket, path=path, size=len(data), content_type=content_type)


def _require_key(value: str, collection: str, key: str) -> None:
    if not value:
        raise RecordStoreError(f"Cannot upsert {collection} without {key}", collection=collection)


class FakeRecordStore(_Failing):
    """Failure keys: upsert_camera:<id>, picture_exists, upsert_picture:<photo_id>, insert_sync_result."""

    def __init__(self) -> None:
        super().__init__()
        self.cameras: dict[str, Camera] = {}
        self.pictures: dict[str, Picture] = {}
        self.sync_results: list[SyncResult] = []

    async def upsert_camera(self, camera):
        self._maybe_fail(f"upsert_camera:{camera.camera_id}")
        _require_key(camera.camera_id, "cameras", "camera_id")
        self.cameras[camera.camera_id] = camera
        return camera

    async def picture_exists(self, photo_id):
        self._maybe_fail("picture_exists")
        return photo_id in self.pictures

    async def upsert_picture(self, picture):
        self._maybe_fail(f"upsert_picture:{picture.photo_id}")
        _require_key(picture.photo_id, "pictures", "photo_id")
        self.pictures[picture.photo_id] = picture
        return picture

    async def insert_sync_result(self, result):
        self._maybe_fail("insert_sync_result")
        self.sync_results.append(result)
        return result


class FakeNotifier:
    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.errors: list[tuple[str, str]] = []
        self.messages: list[str] = []

    async def post_error(self, title, message):
        self.errors.append((title, message))
        return NotificationDelivery(success=True)

    async def post_message(self, message):
        self.messages.append(message)
        return NotificationDelivery(success=True)


class SyncWorld:
    """Wires the fakes together and builds PhotoSyncJob instances."""

    def __init__(self, jpeg: bytes) -> None:
        self.jpeg = jpeg
        self.client = FakeSpypointClient()
        self.storage = FakeObjectStorage()
        self.records = FakeRecordStore()
        self.notifier = FakeNotifier()
        self.sleep = AsyncMock()

    def add_camera(
        self,
        camera_id: str,
        name: str,
        photos: list[tuple[str, str]] | None = None,
        user: str = "account-1",
    ) -> SpypointCamera:
        camera = vendor_camera(camera_id, name, user=user)
        self.client.cameras[camera_id] = camera
        batch_photos = [vendor_photo(pid, camera_id, date) for pid, date in photos or []]
        self.client.batches[camera_id] = SpypointPhotoBatch(
            photos=batch_photos,
            camera_ids=[camera_id],
            count_photos=len(batch_photos),
        )
        for photo in batch_photos:
            self.client.images[photo.large.url] = self.jpeg
        return camera

    def photo_url(self, camera_id: str, photo_id: str) -> str:
        return f"https://s3.test/{camera_id}/{photo_id}.jpg"

    def job(self, settings, **kwargs: Any) -> PhotoSyncJob:
        kwargs.setdefault("sleep", self.sleep)
        kwargs.setdefault("clock", lambda: FIXED_NOW)
        return PhotoSyncJob(
            settings,
            self.client,  # type: ignore[arg-type]
            self.storage,
            self.records,  # type: ignore[arg-type]
            self.notifier,  # type: ignore[arg-type]
            **kwargs,
        )


@pytest.fixture
def world(jpeg_bytes) -> SyncWorld:
    return SyncWorld(jpeg_bytes)
