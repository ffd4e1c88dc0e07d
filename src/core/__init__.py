"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Geo/distance calculations
- Proximity queries over location snapshots
- Retry/backoff policy
- Message formatting
- Configuration models and validation

All functions here are deterministic and have no I/O.
"""

from src.core.geo import Coordinate, calculate_distance, SOS_RADIUS_KM
from src.core.proximity import NearbyUser, find_nearby, find_within_radius
from src.core.retry import RetryPolicy
from src.core.formatter import format_sos_message, format_push_data
from src.core.config import Config, PushProviderConfig, validate_config

__all__ = [
    # Geo
    "Coordinate",
    "calculate_distance",
    "SOS_RADIUS_KM",
    # Proximity
    "NearbyUser",
    "find_nearby",
    "find_within_radius",
    # Retry
    "RetryPolicy",
    # Formatter
    "format_sos_message",
    "format_push_data",
    # Config
    "Config",
    "PushProviderConfig",
    "validate_config",
]
