"""HTTP client for the Spypoint cellular trail-camera REST API.

Request Flow:
    1. POST credentials to the login endpoint and receive a bearer token
    2. Thread the resulting SpypointSession through every later call
    3. GET the camera list, then each camera's detail
    4. POST a photo query per camera and download photo variants

Error Handling:
    - Non-2xx responses: Raise SpypointAPIError with the vendor's
      ``{"error": ..., "http_status": ...}`` body when present
    - Connection errors and timeouts: Raise SpypointTransportError
    - Invalid JSON or unexpected shapes on a 2xx: Raise SpypointAPIError

The client never retries. The orchestrator decides whether a failure aborts
the run, skips a camera or skips a photo.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from trailsync.core.config import get_settings
from trailsync.core.exceptions import SpypointAPIError, SpypointTransportError
from trailsync.core.logging import get_logger, sanitize_error
from trailsync.services.spypoint_schemas import (
    FAR_FUTURE_DATE_END,
    SpypointCamera,
    SpypointCredentials,
    SpypointLoginResponse,
    SpypointPhotoBatch,
    SpypointPhotosRequest,
)

logger = get_logger(__name__)

PATH_LOGIN = "/api/v3/user/login"
PATH_CAMERAS_ALL = "/api/v3/camera/all"
PATH_CAMERA = "/api/v3/camera/{camera_id}"
PATH_PHOTOS = "/api/v3/photo/all"

# The API rejects requests without a browser-like agent
USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:126.0) Gecko/20100101"

SPYPOINT_CONNECT_TIMEOUT = 15.0
SPYPOINT_READ_TIMEOUT = 30.0
SPYPOINT_TOTAL_TIMEOUT = 45.0

DEFAULT_PHOTO_LIMIT = 125

T = TypeVar("T")

_LOGIN_ADAPTER = TypeAdapter(SpypointLoginResponse)
_CAMERA_ADAPTER = TypeAdapter(SpypointCamera)
_CAMERA_LIST_ADAPTER = TypeAdapter(list[SpypointCamera])
_PHOTO_BATCH_ADAPTER = TypeAdapter(SpypointPhotoBatch)


@dataclass(frozen=True, slots=True)
class SpypointSession:
    """Authenticated vendor session returned by ``SpypointClient.login``.

    Immutable; a new login produces a new value.
    """

    token: str = field(repr=False)
    uuid: str = ""

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class SpypointClient:
    """Async client for the Spypoint REST API.

    Example:
        async with SpypointClient() as client:
            session = await client.login(SpypointCredentials(username=u, password=p))
            for camera in await client.list_cameras(session):
                batch = await client.list_photos(session, camera.id)
    """

    def __init__(
        self,
        host: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        total_timeout: float = SPYPOINT_TOTAL_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            host: API base URL. Defaults to the configured SPYPOINT_HOST.
            http_client: Optional preconfigured client (tests inject one
                backed by httpx.MockTransport). The caller keeps ownership.
            total_timeout: Upper bound in seconds for one request, including
                reading the whole body.
        """
        if host is None:
            host = get_settings().spypoint_host
        self._host = host.rstrip("/")
        self._total_timeout = total_timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=SPYPOINT_CONNECT_TIMEOUT,
                read=SPYPOINT_READ_TIMEOUT,
                write=SPYPOINT_READ_TIMEOUT,
                pool=SPYPOINT_CONNECT_TIMEOUT,
            ),
        )

    async def __aenter__(self) -> SpypointClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    @property
    def host(self) -> str:
        return self._host

    async def login(self, credentials: SpypointCredentials) -> SpypointSession:
        """Authenticate and return a new session.

        Raises:
            SpypointAPIError: Rejected credentials or malformed response
            SpypointTransportError: The API could not be reached
        """
        response = await self._request(
            "POST",
            PATH_LOGIN,
            json=credentials.model_dump(by_alias=True),
        )
        login = self._decode(response, _LOGIN_ADAPTER, PATH_LOGIN)
        logger.info(
            "Authenticated with Spypoint API",
            extra={"spypoint_user": credentials.username},
        )
        return SpypointSession(token=login.token, uuid=login.uuid)

    async def list_cameras(self, session: SpypointSession) -> list[SpypointCamera]:
        """List every camera owned by the account."""
        response = await self._request("GET", PATH_CAMERAS_ALL, session=session)
        cameras = self._decode(response, _CAMERA_LIST_ADAPTER, PATH_CAMERAS_ALL)
        logger.debug(f"Spypoint returned {len(cameras)} cameras")
        return cameras

    async def get_camera(self, session: SpypointSession, camera_id: str) -> SpypointCamera:
        """Fetch the detail of one camera."""
        path = PATH_CAMERA.format(camera_id=camera_id)
        response = await self._request("GET", path, session=session)
        return self._decode(response, _CAMERA_ADAPTER, path)

    async def list_photos(
        self,
        session: SpypointSession,
        camera_id: str,
        limit: int = DEFAULT_PHOTO_LIMIT,
        date_end: str = FAR_FUTURE_DATE_END,
    ) -> SpypointPhotoBatch:
        """Fetch the most recent photos of one camera, newest first.

        Args:
            session: Authenticated session
            camera_id: Vendor camera id
            limit: Maximum number of photos to return
            date_end: Upper date bound. The far-future default selects the
                newest photos.
        """
        body = SpypointPhotosRequest(camera=[camera_id], date_end=date_end, limit=limit)
        response = await self._request(
            "POST",
            PATH_PHOTOS,
            session=session,
            json=body.model_dump(by_alias=True),
        )
        return self._decode(response, _PHOTO_BATCH_ADAPTER, PATH_PHOTOS)

    async def download_photo(self, url: str) -> bytes:
        """Download a photo variant.

        Variant URLs are pre-signed, so no Authorization header is sent.
        """
        response = await self._request("GET", url)
        return response.content

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        return f"{self._host}{path_or_url}"

    async def _request(
        self,
        method: str,
        path_or_url: str,
        *,
        session: SpypointSession | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = {"User-Agent": USER_AGENT}
        if session is not None:
            headers.update(session.auth_headers())

        url = self._url(path_or_url)
        try:
            async with asyncio.timeout(self._total_timeout):
                response = await self._client.request(method, url, headers=headers, json=json)
        except (httpx.TimeoutException, TimeoutError) as e:
            raise SpypointTransportError(
                f"Spypoint request timed out: {method} {path_or_url}",
                original_error=e,
            ) from e
        except httpx.RequestError as e:
            raise SpypointTransportError(
                f"Spypoint request failed: {method} {path_or_url}: {sanitize_error(e)}",
                original_error=e,
            ) from e

        if not response.is_success:
            raise self._api_error(response)
        return response

    @staticmethod
    def _api_error(response: httpx.Response) -> SpypointAPIError:
        vendor_message: str | None = None
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("error") is not None:
            vendor_message = str(body["error"])
        elif response.text:
            vendor_message = response.text[:200]
        else:
            vendor_message = response.reason_phrase

        return SpypointAPIError(status_code=response.status_code, vendor_message=vendor_message)

    @staticmethod
    def _decode(response: httpx.Response, adapter: TypeAdapter[T], path: str) -> T:
        try:
            return adapter.validate_json(response.content)
        except PydanticValidationError as e:
            logger.warning(
                f"Unexpected Spypoint response for {path}: {sanitize_error(e)}",
                extra={"path": path, "status_code": response.status_code},
            )
            raise SpypointAPIError(
                f"Invalid response body for {path}",
                status_code=response.status_code,
                vendor_message="invalid response body",
                original_error=e,
            ) from e
