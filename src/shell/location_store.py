"""Location Store - Imperative Shell.

This module holds the live, in-memory state of the service:
- Latest known location per user (LocationRegistry)
- SOS button press counts per user (SosPressCounter)

Both are shared by every request handler, so all access goes through a
lock. Proximity logic lives in the core module and only ever sees
snapshots.
"""

import logging
import threading
import time
from dataclasses import dataclass

from src.core.geo import Coordinate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationEntry:
    """Latest known location of one user.

    Attributes:
        user_id: User identifier
        coordinate: Last reported position
        updated_at: Unix timestamp of the last report
    """
    user_id: str
    coordinate: Coordinate
    updated_at: float


class LocationRegistry:
    """Maps user identifier to latest coordinate, last write wins.

    Entries are immutable and replaced whole, so a reader never sees a
    half-written entry. Entries keep the position of their first insert.
    """

    def __init__(self) -> None:
        self._entries: dict[str, LocationEntry] = {}
        self._lock = threading.Lock()

    def upsert(
        self,
        user_id: str,
        coordinate: Coordinate,
        now: float | None = None,
    ) -> LocationEntry:
        """Insert or overwrite the location for user_id.

        Args:
            user_id: User identifier
            coordinate: New position
            now: Timestamp to record (defaults to current time)

        Returns:
            The stored entry
        """
        entry = LocationEntry(
            user_id=user_id,
            coordinate=coordinate,
            updated_at=time.time() if now is None else now,
        )
        with self._lock:
            self._entries[user_id] = entry
        return entry

    def get(self, user_id: str) -> LocationEntry | None:
        """Get the latest entry for a user, if any."""
        with self._lock:
            return self._entries.get(user_id)

    def snapshot(self) -> tuple[LocationEntry, ...]:
        """Point-in-time copy of all entries.

        Later upserts do not affect the returned tuple.
        """
        with self._lock:
            return tuple(self._entries.values())

    def evict_stale(self, max_age_seconds: float, now: float | None = None) -> int:
        """Remove entries not updated within max_age_seconds.

        Args:
            max_age_seconds: Maximum age of an entry to keep
            now: Reference time (defaults to current time)

        Returns:
            Number of entries removed
        """
        cutoff = (time.time() if now is None else now) - max_age_seconds
        with self._lock:
            stale = [
                user_id for user_id, entry in self._entries.items()
                if entry.updated_at < cutoff
            ]
            for user_id in stale:
                del self._entries[user_id]

        if stale:
            logger.info("Evicted %d stale locations", len(stale))
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SosPressCounter:
    """Counts SOS presses per user. Increment-only."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def increment(self, user_id: str) -> int:
        """Record one press and return the new count."""
        with self._lock:
            count = self._counts.get(user_id, 0) + 1
            self._counts[user_id] = count
        return count

    def get(self, user_id: str) -> int:
        """Presses recorded for user_id (0 if none)."""
        with self._lock:
            return self._counts.get(user_id, 0)
