"""Realtime Broadcast - Imperative Shell.

Fans events out to every connected WebSocket listener. Delivery is best
effort: a listener that cannot be written to in time is dropped.
"""

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket


logger = logging.getLogger(__name__)


DEFAULT_SEND_TIMEOUT_SECONDS = 5.0


class ConnectionManager:
    """Tracks active WebSocket connections and broadcasts events to them."""

    def __init__(self, send_timeout_seconds: float = DEFAULT_SEND_TIMEOUT_SECONDS) -> None:
        """Initialize the manager.

        Args:
            send_timeout_seconds: Time a single listener gets to accept an event
        """
        self.send_timeout_seconds = send_timeout_seconds
        self._connections: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections.add(websocket)
        logger.info("A client connected (total=%d)", self.total_connections)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.discard(websocket)
        logger.info("A client disconnected (total=%d)", self.total_connections)

    async def _send(self, websocket: WebSocket, payload: str) -> bool:
        try:
            await asyncio.wait_for(websocket.send_text(payload), timeout=self.send_timeout_seconds)
            return True
        except asyncio.TimeoutError:
            logger.warning(
                "Dropping listener that did not take the event within %.1fs",
                self.send_timeout_seconds,
            )
        except Exception as e:
            logger.warning("Dropping listener after failed send: %s", e)
        return False

    async def publish(self, event: str, data: Any) -> None:
        """Send an event to all connected listeners concurrently."""
        payload = json.dumps({"event": event, "data": data}, default=str)
        async with self._lock:
            connections = list(self._connections)

        if not connections:
            return

        delivered = await asyncio.gather(*(self._send(ws, payload) for ws in connections))
        dead = [ws for ws, ok in zip(connections, delivered) if not ok]

        if dead:
            async with self._lock:
                for ws in dead:
                    self._connections.discard(ws)

    @property
    def total_connections(self) -> int:
        return len(self._connections)
