"""Imperative Shell - I/O, shared state and side effects.

This module contains all code that interacts with external systems
or holds mutable state:
- Native Notify push client (HTTP)
- Location registry and SOS press counter (in-memory, locked)
- WebSocket broadcast channel
- Configuration loading (environment/files/Secret Manager)

Keep this layer thin and simple. All business logic should be in core.
"""

from src.shell.push_client import PushClient, PushResponse
from src.shell.location_store import LocationRegistry, LocationEntry, SosPressCounter
from src.shell.broadcast import ConnectionManager
from src.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "PushClient",
    "PushResponse",
    "LocationRegistry",
    "LocationEntry",
    "SosPressCounter",
    "ConnectionManager",
    "load_config",
    "load_config_from_env",
]
