"""Realtime notification helpers for the infrastructure layer."""

from .change_feed import (
    NOTIFICATION_CREATED,
    NOTIFICATION_DELETED,
    NOTIFICATION_UPDATED,
    NotificationChangeFeed,
    channel_name,
    notification_change_feed,
    record_change,
    record_changes,
    snapshot_model,
)
from .manager import NotificationConnectionManager, notification_manager
from .publisher import WebsocketEventForwarder, serialize_notification
from .realtime import (
    ChangeFeedRealtimeClient,
    DisabledRealtimeClient,
    RealtimeClient,
    get_realtime_client,
)

__all__ = [
    "NOTIFICATION_CREATED",
    "NOTIFICATION_DELETED",
    "NOTIFICATION_UPDATED",
    "ChangeFeedRealtimeClient",
    "DisabledRealtimeClient",
    "NotificationChangeFeed",
    "NotificationConnectionManager",
    "RealtimeClient",
    "WebsocketEventForwarder",
    "channel_name",
    "get_realtime_client",
    "notification_change_feed",
    "notification_manager",
    "record_change",
    "record_changes",
    "serialize_notification",
    "snapshot_model",
]
