"""Geographic calculations - Pure functions.

This module provides distance and radius calculations for user locations.
All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass


# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Radius around an SOS sender within which other users are alerted
SOS_RADIUS_KM = 5.0

GOOGLE_MAPS_URL = "https://www.google.com/maps"


@dataclass(frozen=True)
class Coordinate:
    """A GPS position.

    Attributes:
        latitude: Latitude in degrees, [-90, 90]
        longitude: Longitude in degrees, [-180, 180]
    """
    latitude: float
    longitude: float


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate distance between two points using Haversine formula.

    Pure function.

    Args:
        lat1: Latitude of first point
        lon1: Longitude of first point
        lat2: Latitude of second point
        lon2: Longitude of second point

    Returns:
        Distance in kilometers
    """
    # Convert to radians
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    # Haversine formula
    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    # Rounding can push a just outside [0, 1] near antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_between(a: Coordinate, b: Coordinate) -> float:
    """Distance in kilometers between two coordinates.

    Pure function.
    """
    return calculate_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def build_maps_link(coordinate: Coordinate) -> str:
    """Build a Google Maps URL pointing at a coordinate.

    Pure function.
    """
    return f"{GOOGLE_MAPS_URL}?q={coordinate.latitude},{coordinate.longitude}"
