"""Slack webhook notifications for sync failures and run summaries.

Usage:
    from trailsync.services.notification import SlackNotifier

    notifier = SlackNotifier.from_settings(settings)
    await notifier.post_error("Spypoint", "http_status 401, error Unauthorized")
    await notifier.post_message("sync finished: 0 errors")

Delivery never raises. Every attempt returns a NotificationDelivery that
records success or the failure reason, and failures are logged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import httpx

from trailsync.core.logging import get_logger, sanitize_error

if TYPE_CHECKING:
    from trailsync.core.config import Settings

logger = get_logger(__name__)

ERROR_COLOR = "#f00"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass
class NotificationDelivery:
    """Result of a notification delivery attempt."""

    success: bool
    error: str | None = None
    delivered_at: datetime | None = None


def build_error_payload(title: str, message: str) -> dict[str, Any]:
    """Slack payload for an error notification."""
    return {
        "text": message,
        "attachments": [
            {
                "title": f"{title} API Error",
                "color": ERROR_COLOR,
                "fields": [],
            }
        ],
    }


def build_message_payload(message: str) -> dict[str, Any]:
    """Slack payload for a plain message, rendered as a code block."""
    return {"text": f"```{message}```"}


class SlackNotifier:
    """Posts to a Slack incoming webhook.

    A notifier without a webhook URL is disabled and every post is a no-op.
    """

    def __init__(
        self,
        webhook_url: str | None,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._webhook_url = webhook_url or None
        self._timeout_seconds = timeout_seconds
        self._owns_client = http_client is None
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> SlackNotifier:
        return cls(settings.slack_url, timeout_seconds=settings.notification_timeout_seconds)

    @property
    def enabled(self) -> bool:
        return self._webhook_url is not None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout_seconds))
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client if this notifier created it."""
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def post_error(self, title: str, message: str) -> NotificationDelivery:
        """Post an error notification titled ``<title> API Error``."""
        return await self._send(build_error_payload(title, message))

    async def post_message(self, message: str) -> NotificationDelivery:
        """Post a plain message."""
        return await self._send(build_message_payload(message))

    async def _send(self, payload: dict[str, Any]) -> NotificationDelivery:
        if self._webhook_url is None:
            return NotificationDelivery(success=False, error="No webhook URL configured")

        try:
            client = self._get_http_client()
            response = await client.post(
                self._webhook_url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException:
            error_msg = f"Slack webhook timed out after {self._timeout_seconds}s"
            logger.error(error_msg)
            return NotificationDelivery(success=False, error=error_msg)
        except httpx.RequestError as e:
            error_msg = f"Slack webhook request failed: {sanitize_error(e)}"
            logger.error(error_msg)
            return NotificationDelivery(success=False, error=error_msg)
        except Exception as e:
            error_msg = f"Slack webhook delivery failed: {sanitize_error(e)}"
            logger.exception(error_msg)
            return NotificationDelivery(success=False, error=error_msg)

        if not response.is_success:
            # Status code only; the response body is not trusted log content
            logger.warning("Slack webhook returned error status %s", response.status_code)
            return NotificationDelivery(
                success=False,
                error=f"Slack webhook returned status {response.status_code}",
            )

        return NotificationDelivery(success=True, delivered_at=datetime.now(UTC))
