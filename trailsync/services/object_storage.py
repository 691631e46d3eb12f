"""Object storage drivers for photos and thumbnails.

Two drivers implement the ObjectStorage protocol:
    - GCSObjectStorage: Google Cloud Storage. The google-cloud-storage client
      is blocking, so uploads run in a worker thread.
    - LocalObjectStorage: Writes ``<root>/<bucket>/<path>`` on the local
      filesystem. Used for development and tests.

Both raise ObjectStorageError on failure and never retry.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud import storage as gcs

from trailsync.core.exceptions import ConfigurationError, ObjectStorageError
from trailsync.core.logging import get_logger, sanitize_error

if TYPE_CHECKING:
    from trailsync.core.config import Settings

logger = get_logger(__name__)

MIME_JPEG = "image/jpeg"


@dataclass(frozen=True, slots=True)
class StoredObject:
    """Location of an object after a successful upload."""

    bucket: str
    path: str
    size: int
    content_type: str


@runtime_checkable
class ObjectStorage(Protocol):
    """Protocol for object storage backends."""

    async def put(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = MIME_JPEG,
    ) -> StoredObject:
        """Store ``data`` at ``bucket``/``path``.

        Raises:
            ObjectStorageError: If the object could not be written
        """
        ...


class GCSObjectStorage:
    """Google Cloud Storage driver.

    Credentials come from a service account JSON file when configured and
    from application default credentials otherwise. The client is created on
    first upload.
    """

    def __init__(
        self,
        credentials_file: str | None = None,
        *,
        client: gcs.Client | None = None,
    ) -> None:
        self._credentials_file = credentials_file
        self._client = client

    def _get_client(self) -> gcs.Client:
        if self._client is None:
            if self._credentials_file:
                self._client = gcs.Client.from_service_account_json(self._credentials_file)
            else:
                self._client = gcs.Client()
        return self._client

    def _upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        blob = self._get_client().bucket(bucket).blob(path)
        blob.upload_from_string(data, content_type=content_type)

    async def put(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = MIME_JPEG,
    ) -> StoredObject:
        try:
            await asyncio.to_thread(self._upload, bucket, path, data, content_type)
        except (
            google_exceptions.GoogleAPIError,
            google_auth_exceptions.GoogleAuthError,
            OSError,
        ) as e:
            raise ObjectStorageError(
                f"Upload to gs://{bucket}/{path} failed: {sanitize_error(e)}",
                bucket=bucket,
                path=path,
                original_error=e,
            ) from e

        logger.debug(
            f"Uploaded gs://{bucket}/{path}",
            extra={"bucket": bucket, "path": path, "size": len(data)},
        )
        return StoredObject(bucket=bucket, path=path, size=len(data), content_type=content_type)


class LocalObjectStorage:
    """Filesystem driver writing objects under a root directory."""

    def __init__(self, root_dir: str | Path) -> None:
        self._root = Path(root_dir)

    @property
    def root(self) -> Path:
        return self._root

    def _target(self, bucket: str, path: str) -> Path:
        base = (self._root / bucket).resolve()
        target = (base / path).resolve()
        if not target.is_relative_to(base):
            raise ObjectStorageError(
                f"Object path escapes bucket directory: {path}",
                bucket=bucket,
                path=path,
            )
        return target

    def _write(self, target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    async def put(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = MIME_JPEG,
    ) -> StoredObject:
        target = self._target(bucket, path)
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as e:
            raise ObjectStorageError(
                f"Write to {bucket}/{path} failed: {sanitize_error(e)}",
                bucket=bucket,
                path=path,
                original_error=e,
            ) from e

        logger.debug(
            f"Stored {bucket}/{path} locally",
            extra={"bucket": bucket, "path": path, "size": len(data)},
        )
        return StoredObject(bucket=bucket, path=path, size=len(data), content_type=content_type)


def get_object_storage(settings: Settings) -> ObjectStorage:
    """Build the storage driver selected by STORAGE_DRIVER.

    Raises:
        ConfigurationError: If the driver name is unknown
    """
    if settings.storage_driver == "gcs":
        return GCSObjectStorage(settings.gcp_credentials_file)
    if settings.storage_driver == "local":
        return LocalObjectStorage(settings.local_storage_dir)
    raise ConfigurationError(
        f"Unknown storage driver: {settings.storage_driver}",
        details={"storage_driver": settings.storage_driver},
    )
