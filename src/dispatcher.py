"""Notification Dispatcher - Delivers one alert to one user with retry.

Wraps the push client (imperative shell) with the retry policy from the
functional core. Provider calls are blocking HTTP requests, so each one
runs in a worker thread; backoff waits are asyncio sleeps so that a
recipient waiting to retry never holds up another recipient.
"""

import asyncio
import logging
from dataclasses import dataclass

from src.core.formatter import DEFAULT_SCREEN, DEFAULT_TITLE, format_push_data
from src.core.geo import Coordinate
from src.core.retry import RetryPolicy
from src.shell.push_client import PushClient, PushResponse


logger = logging.getLogger(__name__)


@dataclass
class DeliveryOutcome:
    """Terminal result of delivering an alert to one recipient.

    Attributes:
        recipient_id: User the alert was addressed to
        success: Whether any attempt succeeded
        attempts: Number of provider calls made
        error: Last error if every attempt failed
    """
    recipient_id: str
    success: bool
    attempts: int
    error: str | None = None


class NotificationDispatcher:
    """Sends alerts through the push provider with bounded retry."""

    def __init__(
        self,
        push_client: PushClient,
        retry_policy: RetryPolicy | None = None,
        title: str = DEFAULT_TITLE,
    ) -> None:
        """Initialize dispatcher.

        Args:
            push_client: Client used for each delivery attempt
            retry_policy: Attempt count and backoff (defaults to 3 x 1s)
            title: Notification title
        """
        self.push_client = push_client
        self.retry_policy = retry_policy or RetryPolicy()
        self.title = title

    async def _attempt(self, recipient_id: str, message: str, push_data: dict) -> PushResponse:
        try:
            return await asyncio.to_thread(
                self.push_client.send_notification,
                recipient_id,
                self.title,
                message,
                push_data,
            )
        except Exception as e:
            # Whatever the cause, a failed call is just a retryable failure
            return PushResponse(success=False, status_code=0, error=str(e))

    async def send(
        self,
        recipient_id: str,
        message: str,
        coordinate: Coordinate,
        screen: str = DEFAULT_SCREEN,
    ) -> DeliveryOutcome:
        """Deliver an alert to one recipient.

        Stops at the first successful attempt. Never raises for delivery
        failures; exhaustion is logged and returned as an outcome.

        Args:
            recipient_id: User to notify
            message: Notification body
            coordinate: Location of the SOS
            screen: App screen to open from the notification

        Returns:
            DeliveryOutcome for this recipient
        """
        policy = self.retry_policy
        push_data = format_push_data(coordinate, screen)
        error: str | None = None

        for attempt in range(1, policy.max_attempts + 1):
            response = await self._attempt(recipient_id, message, push_data)

            if response.success:
                return DeliveryOutcome(
                    recipient_id=recipient_id,
                    success=True,
                    attempts=attempt,
                )

            error = response.error
            logger.warning(
                "Error sending notification to user %s on attempt %d/%d: %s",
                recipient_id,
                attempt,
                policy.max_attempts,
                error,
            )

            if policy.should_retry(attempt):
                await asyncio.sleep(policy.delay_for(attempt))

        logger.error(
            "Delivery exhausted: failed to send notification to user %s after %d attempts",
            recipient_id,
            policy.max_attempts,
        )
        return DeliveryOutcome(
            recipient_id=recipient_id,
            success=False,
            attempts=policy.max_attempts,
            error=error,
        )
