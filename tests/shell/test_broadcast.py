"""Tests for the WebSocket broadcast manager.

WebSockets are replaced by AsyncMocks.
"""

import asyncio
import json
import time
from unittest.mock import AsyncMock

from src.shell.broadcast import ConnectionManager


def _connected(manager, count):
    sockets = [AsyncMock() for _ in range(count)]

    async def connect_all():
        for ws in sockets:
            await manager.connect(ws)

    asyncio.run(connect_all())
    return sockets


class TestConnectionManager:
    """Tests for ConnectionManager."""

    def test_connect_accepts_and_tracks(self):
        """Connecting accepts the socket and counts it."""
        manager = ConnectionManager()

        (ws,) = _connected(manager, 1)

        ws.accept.assert_awaited_once()
        assert manager.total_connections == 1

    def test_publish_reaches_every_listener(self):
        """Every connected socket receives the event as JSON."""
        manager = ConnectionManager()
        sockets = _connected(manager, 3)

        asyncio.run(manager.publish("sosAlert", {"userId": "alice"}))

        for ws in sockets:
            payload = json.loads(ws.send_text.await_args.args[0])
            assert payload == {"event": "sosAlert", "data": {"userId": "alice"}}

    def test_failed_listener_is_dropped(self):
        """A socket that errors is removed; others still get the event."""
        manager = ConnectionManager()
        good, bad = _connected(manager, 2)
        bad.send_text.side_effect = RuntimeError("closed")

        asyncio.run(manager.publish("locationUpdate", {"userId": "bob"}))

        good.send_text.assert_awaited_once()
        assert manager.total_connections == 1

    def test_disconnect(self):
        """Disconnected sockets no longer receive events."""
        manager = ConnectionManager()
        (ws,) = _connected(manager, 1)

        asyncio.run(manager.disconnect(ws))
        asyncio.run(manager.publish("sosAlert", {}))

        ws.send_text.assert_not_awaited()
        assert manager.total_connections == 0

    def test_publish_without_listeners(self):
        """Publishing with nobody connected is a no-op."""
        asyncio.run(ConnectionManager().publish("sosAlert", {"userId": "alice"}))

    def test_slow_listener_is_dropped_after_timeout(self):
        """A listener that never takes the event is dropped; others still get it."""
        manager = ConnectionManager(send_timeout_seconds=0.1)
        good, stalled = _connected(manager, 2)

        async def never_returns(payload):
            await asyncio.sleep(3600)

        stalled.send_text.side_effect = never_returns

        asyncio.run(asyncio.wait_for(manager.publish("sosAlert", {}), timeout=2))

        good.send_text.assert_awaited_once()
        assert manager.total_connections == 1

    def test_listeners_are_sent_to_concurrently(self):
        """Slow listeners time out together rather than one after another."""
        manager = ConnectionManager(send_timeout_seconds=0.2)
        sockets = _connected(manager, 5)

        async def never_returns(payload):
            await asyncio.sleep(3600)

        for ws in sockets:
            ws.send_text.side_effect = never_returns

        start = time.monotonic()
        asyncio.run(manager.publish("sosAlert", {}))
        elapsed = time.monotonic() - start

        assert elapsed < 0.8
        assert manager.total_connections == 0
