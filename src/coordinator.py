"""SOS Coordinator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data for the three operations the
HTTP layer exposes:
- Triggering an SOS (scan nearby users, fan out notifications)
- Updating a user's location
- Querying users near a point
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from src.core.config import Config
from src.core.formatter import (
    format_location_event,
    format_sos_event,
    format_sos_message,
    format_sos_summary,
)
from src.core.geo import Coordinate
from src.core.proximity import NearbyUser, find_nearby, find_within_radius
from src.dispatcher import DeliveryOutcome, NotificationDispatcher
from src.shell.location_store import LocationEntry, LocationRegistry, SosPressCounter


logger = logging.getLogger(__name__)


SOS_ALERT_EVENT = "sosAlert"
LOCATION_UPDATE_EVENT = "locationUpdate"


class Broadcaster(Protocol):
    """Realtime channel that pushes events to connected listeners."""

    async def publish(self, event: str, data: Any) -> None: ...


class SosOrchestrationError(Exception):
    """Raised when an SOS could not be processed as a whole.

    Individual delivery failures never raise this; they are reported
    in SosResult.failed.
    """


@dataclass
class SosResult:
    """Result of processing one SOS trigger.

    Attributes:
        sender_id: User who pressed SOS
        recipients: Users the alert was dispatched to
        succeeded: Deliveries that reached the provider
        failed: Deliveries that exhausted every attempt
    """
    sender_id: str
    recipients: list[str]
    succeeded: list[DeliveryOutcome] = field(default_factory=list)
    failed: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def delivered_count(self) -> int:
        """Number of recipients a delivery was attempted for."""
        return len(self.recipients)

    @property
    def summary(self) -> str:
        """Human-readable summary of the fan-out."""
        return format_sos_summary(
            self.sender_id,
            len(self.recipients),
            len(self.succeeded),
        )


class SosCoordinator:
    """Coordinates location tracking and SOS alerting.

    This class wires together:
    - Location registry and press counter (shared in-memory state)
    - Core functions (proximity, formatting)
    - Notification dispatcher (push delivery with retry)
    - Broadcaster (realtime listeners, optional)
    """

    def __init__(
        self,
        config: Config,
        dispatcher: NotificationDispatcher,
        registry: LocationRegistry | None = None,
        press_counter: SosPressCounter | None = None,
        broadcaster: Broadcaster | None = None,
    ) -> None:
        """Initialize coordinator.

        Args:
            config: Application configuration
            dispatcher: Delivers alerts to single recipients
            registry: Location registry (created if not provided)
            press_counter: SOS press counter (created if not provided)
            broadcaster: Realtime event channel (events are skipped if None)
        """
        self.config = config
        self.dispatcher = dispatcher
        self.registry = registry if registry is not None else LocationRegistry()
        self.press_counter = press_counter if press_counter is not None else SosPressCounter()
        self.broadcaster = broadcaster
        self._pending_broadcasts: set[asyncio.Task] = set()

    async def _broadcast(self, event: str, data: dict[str, Any]) -> None:
        try:
            await self.broadcaster.publish(event, data)
        except Exception as e:
            logger.warning("Failed to broadcast %s event: %s", event, e)

    def _publish(self, event: str, data: dict[str, Any]) -> None:
        """Schedule a broadcast without waiting for listeners."""
        if self.broadcaster is None:
            return
        task = asyncio.create_task(self._broadcast(event, data))
        self._pending_broadcasts.add(task)
        task.add_done_callback(self._pending_broadcasts.discard)

    async def wait_for_broadcasts(self) -> None:
        """Wait until every scheduled broadcast has finished."""
        while True:
            pending = [t for t in self._pending_broadcasts if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending)

    def _record_press(self, sender_id: str) -> None:
        try:
            count = self.press_counter.increment(sender_id)
            logger.info("SOS press #%d from user %s", count, sender_id)
        except Exception:
            logger.exception("Failed to record SOS press for user %s", sender_id)

    def _current_locations(self) -> tuple[LocationEntry, ...]:
        if self.config.location_ttl_seconds is not None:
            self.registry.evict_stale(self.config.location_ttl_seconds)
        return self.registry.snapshot()

    def _find_recipients(self, sender_id: str, coordinate: Coordinate) -> list[str]:
        exclude = None if self.config.notify_sender else sender_id
        return find_within_radius(
            coordinate,
            self.config.alert_radius_km,
            self._current_locations(),
            exclude=exclude,
        )

    async def _dispatch_all(
        self,
        recipients: list[str],
        message: str,
        coordinate: Coordinate,
    ) -> list[DeliveryOutcome]:
        """Send to every recipient concurrently, bounded by a semaphore."""
        semaphore = asyncio.Semaphore(self.config.max_concurrent_sends)
        screen = self.config.push.screen

        async def send_one(recipient_id: str) -> DeliveryOutcome:
            async with semaphore:
                return await self.dispatcher.send(recipient_id, message, coordinate, screen)

        return await asyncio.gather(*(send_one(r) for r in recipients))

    async def trigger_sos(self, sender_id: str, coordinate: Coordinate) -> SosResult:
        """Process an SOS press.

        This is the main entry point that:
        1. Records the press
        2. Finds users within the alert radius of the sender
        3. Sends every one of them the same alert, concurrently
        4. Schedules a broadcast of the SOS to realtime listeners

        Args:
            sender_id: User who pressed SOS
            coordinate: Sender's current location

        Returns:
            SosResult; delivered_count is the number of recipients targeted

        Raises:
            SosOrchestrationError: If the scan or fan-out itself failed
        """
        self._record_press(sender_id)
        message = format_sos_message(coordinate)

        try:
            recipients = self._find_recipients(sender_id, coordinate)

            if not recipients:
                logger.info("No nearby users to notify.")
                outcomes: list[DeliveryOutcome] = []
            else:
                logger.info(
                    "Notifying %d users within %.1f km of user %s",
                    len(recipients),
                    self.config.alert_radius_km,
                    sender_id,
                )
                outcomes = await self._dispatch_all(recipients, message, coordinate)
        except Exception as e:
            logger.exception("Failed to process SOS from user %s", sender_id)
            raise SosOrchestrationError(f"Failed to process SOS: {e}") from e

        result = SosResult(
            sender_id=sender_id,
            recipients=recipients,
            succeeded=[o for o in outcomes if o.success],
            failed=[o for o in outcomes if not o.success],
        )

        for outcome in result.failed:
            logger.error(
                "Alert for SOS from %s not delivered to %s: %s",
                sender_id,
                outcome.recipient_id,
                outcome.error,
            )

        self._publish(SOS_ALERT_EVENT, format_sos_event(sender_id, coordinate, message))

        logger.info("SOS notifications sent to %d users.", result.delivered_count)
        logger.info("Completed: %s", result.summary)
        return result

    async def update_location(self, user_id: str, coordinate: Coordinate) -> LocationEntry:
        """Record the latest location of a user and broadcast it."""
        entry = self.registry.upsert(user_id, coordinate)
        logger.info(
            "Received location update from user %s: Latitude %s, Longitude %s",
            user_id,
            coordinate.latitude,
            coordinate.longitude,
        )
        self._publish(LOCATION_UPDATE_EVENT, format_location_event(user_id, coordinate))
        return entry

    def find_nearby(
        self,
        center: Coordinate,
        radius_km: float | None = None,
    ) -> list[NearbyUser]:
        """Users within radius_km of center (defaults to the alert radius)."""
        radius = self.config.alert_radius_km if radius_km is None else radius_km
        return find_nearby(center, radius, self._current_locations())
