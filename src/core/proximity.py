"""Proximity queries - Pure functions.

Scans a point-in-time snapshot of user locations and selects the users
within a radius of a center point. The snapshot itself is produced by the
location registry in the shell layer; nothing here mutates it.
"""

from dataclasses import dataclass
from typing import Iterable, Protocol

from src.core.geo import Coordinate, distance_between


class LocatedUser(Protocol):
    """Anything with a user_id and a coordinate (e.g. a registry entry)."""

    @property
    def user_id(self) -> str: ...

    @property
    def coordinate(self) -> Coordinate: ...


@dataclass(frozen=True)
class NearbyUser:
    """A user found within the query radius.

    Attributes:
        user_id: User identifier
        coordinate: Last known location of the user
        distance_km: Distance from the query center
    """
    user_id: str
    coordinate: Coordinate
    distance_km: float


def find_nearby(
    center: Coordinate,
    radius_km: float,
    snapshot: Iterable[LocatedUser],
    exclude: str | None = None,
) -> list[NearbyUser]:
    """Find users within radius_km of center.

    Pure function. Linear scan; results keep the snapshot's order.

    Args:
        center: Query center
        radius_km: Inclusive radius in kilometers
        snapshot: Located users to scan
        exclude: Optional user_id to leave out of the results

    Returns:
        Matching users with their distance from center
    """
    nearby = []
    for entry in snapshot:
        if exclude is not None and entry.user_id == exclude:
            continue
        distance = distance_between(center, entry.coordinate)
        if distance <= radius_km:
            nearby.append(NearbyUser(
                user_id=entry.user_id,
                coordinate=entry.coordinate,
                distance_km=distance,
            ))
    return nearby


def find_within_radius(
    center: Coordinate,
    radius_km: float,
    snapshot: Iterable[LocatedUser],
    exclude: str | None = None,
) -> list[str]:
    """Find the identifiers of users within radius_km of center.

    Pure function.

    Args:
        center: Query center
        radius_km: Inclusive radius in kilometers
        snapshot: Located users to scan
        exclude: Optional user_id to leave out of the results

    Returns:
        User identifiers in snapshot order
    """
    return [
        user.user_id
        for user in find_nearby(center, radius_km, snapshot, exclude=exclude)
    ]
