"""Message formatting - Pure functions.

This module formats SOS events into push notification content.
All functions are pure with no side effects.
"""

from typing import Any

from src.core.geo import Coordinate, build_maps_link


DEFAULT_TITLE = "SOS Alert"
DEFAULT_SCREEN = "HelpScreen"
ALERT_TYPE = "SOS"


def format_sos_message(coordinate: Coordinate) -> str:
    """Format the body of an SOS alert.

    The same body is sent to every recipient of one SOS event.

    Pure function.

    Args:
        coordinate: Location of the user in danger

    Returns:
        Message text with the coordinate and a Google Maps link
    """
    maps_url = build_maps_link(coordinate)
    return (
        "Help! I'm in danger. My current location is:\n"
        f"Latitude: {coordinate.latitude}\n"
        f"Longitude: {coordinate.longitude}\n"
        f"[Open in Google Maps]({maps_url})"
    )


def format_push_data(coordinate: Coordinate, screen: str = DEFAULT_SCREEN) -> dict[str, Any]:
    """Structured payload delivered alongside the notification.

    Pure function.
    """
    return {
        "type": ALERT_TYPE,
        "latitude": coordinate.latitude,
        "longitude": coordinate.longitude,
        "screen": screen,
    }


def format_sos_event(sender_id: str, coordinate: Coordinate, message: str) -> dict[str, Any]:
    """Format an SOS event for the realtime broadcast channel.

    Pure function.
    """
    return {
        "userId": sender_id,
        "latitude": coordinate.latitude,
        "longitude": coordinate.longitude,
        "message": message,
    }


def format_location_event(user_id: str, coordinate: Coordinate) -> dict[str, Any]:
    """Format a location update for the realtime broadcast channel.

    Pure function.
    """
    return {
        "userId": user_id,
        "latitude": coordinate.latitude,
        "longitude": coordinate.longitude,
    }


def format_sos_summary(sender_id: str, recipients: int, succeeded: int) -> str:
    """One-line summary of an SOS fan-out for logs.

    Pure function.
    """
    failed = recipients - succeeded
    return (
        f"SOS from {sender_id}: {recipients} nearby users, "
        f"{succeeded} notified, {failed} failed"
    )
