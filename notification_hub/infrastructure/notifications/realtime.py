"""Realtime subscriptions to notification changes.

Two client variants exist. :class:`ChangeFeedRealtimeClient` listens to the
committed-change feed; :class:`DisabledRealtimeClient` is used when realtime
propagation is switched off and turns every subscription into a logged
no-op, so callers never need to check whether live updates are available.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from notification_hub.config import Settings
from notification_hub.domain.entities import NotificationRealtimeEvent, NotificationScope
from notification_hub.utils import now_in_app_timezone

from .change_feed import NotificationChangeFeed, channel_name, notification_change_feed

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[NotificationRealtimeEvent], None]
Unsubscribe = Callable[[], None]


def _noop() -> None:
    return None


class RealtimeClient(ABC):
    """Subscribe callers to the live change stream of one scope target."""

    @abstractmethod
    def subscribe(
        self,
        scope: str | NotificationScope,
        target_id: str,
        handler: NotificationHandler,
    ) -> Unsubscribe:
        """Invoke ``handler`` for every change on the target's channel."""

    def subscribe_to_user_notifications(
        self, user_id: str, handler: NotificationHandler
    ) -> Unsubscribe:
        return self.subscribe(NotificationScope.USER, user_id, handler)

    def subscribe_to_team_notifications(
        self, team_id: str, handler: NotificationHandler
    ) -> Unsubscribe:
        return self.subscribe(NotificationScope.TEAM, team_id, handler)

    def subscribe_to_super_notifications(
        self, super_role: str, handler: NotificationHandler
    ) -> Unsubscribe:
        return self.subscribe(NotificationScope.SUPER, super_role, handler)


class DisabledRealtimeClient(RealtimeClient):
    """Realtime client used when no live backend is available."""

    def subscribe(
        self,
        scope: str | NotificationScope,
        target_id: str,
        handler: NotificationHandler,
    ) -> Unsubscribe:
        logger.warning(
            "Realtime backend not configured; %s will not receive live updates",
            channel_name(scope, target_id),
        )
        return _noop


class ChangeFeedRealtimeClient(RealtimeClient):
    """Realtime client backed by the committed-change feed."""

    def __init__(self, feed: NotificationChangeFeed) -> None:
        self._feed = feed

    def subscribe(
        self,
        scope: str | NotificationScope,
        target_id: str,
        handler: NotificationHandler,
    ) -> Unsubscribe:
        channel = channel_name(scope, target_id)

        def on_change(kind: str, snapshot: dict[str, Any]) -> None:
            handler(
                NotificationRealtimeEvent(
                    event=kind,
                    notification=snapshot,
                    timestamp=now_in_app_timezone().isoformat(),
                )
            )

        try:
            remove = self._feed.listen(channel, on_change)
        except Exception:
            logger.exception("Error subscribing to %s", channel)
            return _noop

        logger.info("Subscribed to %s", channel)
        closed = False

        def unsubscribe() -> None:
            nonlocal closed
            if closed:
                return
            closed = True
            remove()
            logger.info("Subscription closed for %s", channel)

        return unsubscribe


_disabled_client = DisabledRealtimeClient()
_live_client = ChangeFeedRealtimeClient(notification_change_feed)


def get_realtime_client(settings: Settings) -> RealtimeClient:
    """Return the realtime client matching ``settings.realtime_enabled``."""

    return _live_client if settings.realtime_enabled else _disabled_client


__all__ = [
    "ChangeFeedRealtimeClient",
    "DisabledRealtimeClient",
    "NotificationHandler",
    "RealtimeClient",
    "Unsubscribe",
    "get_realtime_client",
]
