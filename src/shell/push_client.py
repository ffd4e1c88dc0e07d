"""Push Notification Client - Imperative Shell.

This module handles HTTP communication with the Native Notify push API.
All I/O is contained here; message formatting is in the core module.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

from src.core.config import PushProviderConfig


logger = logging.getLogger(__name__)


@dataclass
class PushResponse:
    """Response from the push provider.

    Attributes:
        success: Whether the notification was accepted
        status_code: HTTP status code (0 if no response was received)
        error: Error message if failed
    """
    success: bool
    status_code: int
    error: str | None = None


class PushClient:
    """Client for sending push notifications via Native Notify.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(self, config: PushProviderConfig | None = None) -> None:
        """Initialize push client.

        Args:
            config: Provider endpoint, credentials and timeout
        """
        self.config = config or PushProviderConfig()

    def _build_payload(
        self,
        recipient_id: str,
        title: str,
        body: str,
        push_data: dict[str, Any],
    ) -> dict[str, Any]:
        return {
            "subID": recipient_id,
            "appId": self.config.app_id,
            "appToken": self.config.app_token,
            "title": title,
            "body": body,
            "pushData": push_data,
        }

    def send_notification(
        self,
        recipient_id: str,
        title: str,
        body: str,
        push_data: dict[str, Any],
    ) -> PushResponse:
        """Send one push notification to one recipient.

        This method performs HTTP I/O. It never raises for provider
        problems; failures are reported in the response.

        Args:
            recipient_id: Provider subscriber ID of the recipient
            title: Notification title
            body: Notification body
            push_data: Structured data delivered with the notification

        Returns:
            PushResponse indicating success or failure
        """
        payload = self._build_payload(recipient_id, title, body, push_data)

        try:
            response = requests.post(
                self.config.api_url,
                json=payload,
                timeout=self.config.timeout_seconds,
                headers={"Content-Type": "application/json"},
            )

            if 200 <= response.status_code < 300:
                logger.info(
                    "Notification sent to user %s: %d",
                    recipient_id,
                    response.status_code,
                )
                return PushResponse(
                    success=True,
                    status_code=response.status_code,
                )
            else:
                error_text = response.text
                logger.warning(
                    "Push provider returned %d for user %s: %s",
                    response.status_code,
                    recipient_id,
                    error_text,
                )
                return PushResponse(
                    success=False,
                    status_code=response.status_code,
                    error=error_text or f"HTTP {response.status_code}",
                )

        except requests.Timeout:
            logger.error("Push request to user %s timed out", recipient_id)
            return PushResponse(
                success=False,
                status_code=0,
                error="Request timed out",
            )
        except requests.RequestException as e:
            logger.error("Push request to user %s failed: %s", recipient_id, str(e))
            return PushResponse(
                success=False,
                status_code=0,
                error=str(e),
            )
