"""
Connection Hub - Per-connection outboxes for WebSocket delivery.

The game core is synchronous; sockets are not. Publishing only puts a
message on the target connection's queue, and one writer task per
socket drains that queue in order. A slow or dead socket therefore
never blocks a room mutation or another player's delivery.
"""

from __future__ import annotations
from typing import Any
import asyncio
import logging


logger = logging.getLogger(__name__)


class ConnectionHub:
    """Tracks live connections by connection id."""

    def __init__(self):
        self._outboxes: dict[str, asyncio.Queue] = {}

    def register(self, connection_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._outboxes[connection_id] = queue
        return queue

    def unregister(self, connection_id: str):
        self._outboxes.pop(connection_id, None)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._outboxes

    def __len__(self) -> int:
        return len(self._outboxes)

    def publish(self, connection_ids: list[str], message: dict[str, Any]):
        """Queue `message` for every listed connection that is still open."""
        for connection_id in connection_ids:
            queue = self._outboxes.get(connection_id)
            if queue is not None:
                queue.put_nowait(message)

    def send(self, connection_id: str, message: dict[str, Any]):
        self.publish([connection_id], message)

    async def pump(self, connection_id: str, websocket) -> None:
        """Writer loop: deliver queued messages to `websocket` until cancelled."""
        queue = self._outboxes.get(connection_id)
        if queue is None:
            return
        while True:
            message = await queue.get()
            try:
                await websocket.send_json(message)
            except Exception:
                logger.debug("Connection %s: send failed, dropping writer", connection_id)
                return
