"""Connection management helpers for notification websockets."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, Set

from fastapi import WebSocket

Unsubscribe = Callable[[], None]


class NotificationConnectionManager:
    """Manage active websocket connections grouped by realtime channel.

    A channel holds at most one realtime subscription, opened with the first
    connection and closed when the last one leaves.
    """

    def __init__(self) -> None:
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)
        self._subscriptions: Dict[str, Unsubscribe] = {}

    async def connect(
        self,
        channel: str,
        websocket: WebSocket,
        *,
        subscribe: Callable[[], Unsubscribe] | None = None,
    ) -> None:
        """Accept the websocket connection and register it for ``channel``."""

        await websocket.accept()
        self._connections[channel].add(websocket)
        if subscribe is not None and channel not in self._subscriptions:
            self._subscriptions[channel] = subscribe()

    def disconnect(self, channel: str, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``channel``."""

        connections = self._connections.get(channel)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(channel, None)
            unsubscribe = self._subscriptions.pop(channel, None)
            if unsubscribe is not None:
                unsubscribe()

    async def send_to_channel(self, channel: str, message: dict[str, Any]) -> None:
        """Send ``message`` to every active connection listening on ``channel``."""

        connections = list(self._connections.get(channel, set()))
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception:  # pragma: no cover - socket already gone
                self.disconnect(channel, connection)


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
