"""Helpers to forward realtime notification events to websocket clients."""

from __future__ import annotations

import asyncio
from typing import Any, Set

from notification_hub.domain.entities import Notification, NotificationRealtimeEvent

from .manager import NotificationConnectionManager


class WebsocketEventForwarder:
    """Realtime handler that relays events onto a websocket event loop.

    Store commits usually happen on worker threads, so events are handed to
    the loop owning the websocket instead of being sent inline.
    """

    def __init__(
        self,
        manager: NotificationConnectionManager,
        channel: str,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._manager = manager
        self._channel = channel
        self._loop = loop
        self._tasks: Set[asyncio.Task] = set()

    def __call__(self, event: NotificationRealtimeEvent) -> None:
        message = {
            "type": event.event,
            "data": event.notification,
            "timestamp": event.timestamp,
        }
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            task = self._loop.create_task(
                self._manager.send_to_channel(self._channel, message)
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        elif not self._loop.is_closed():
            asyncio.run_coroutine_threadsafe(
                self._manager.send_to_channel(self._channel, message), self._loop
            )


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "type": notification.type,
        "scope": notification.scope,
        "user_id": notification.user_id,
        "team_id": notification.team_id,
        "super_role": notification.super_role,
        "title": notification.title,
        "category": notification.category,
        "avatar_url": notification.avatar_url,
        "metadata": notification.metadata,
        "is_unread": notification.is_unread,
        "is_archived": notification.is_archived,
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "expires_at": notification.expires_at.isoformat()
        if notification.expires_at
        else None,
    }


__all__ = ["WebsocketEventForwarder", "serialize_notification"]
