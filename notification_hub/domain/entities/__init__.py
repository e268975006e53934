"""Domain entities exposed by the application."""

from .delivery import CleanupReport, DeliveryResult, NotificationStats, PushPayload
from .notification import (
    Notification,
    NotificationFilters,
    NotificationRealtimeEvent,
    NotificationRequest,
    NotificationScope,
    NotificationType,
    SuperRole,
)
from .push_subscription import APNS_ENDPOINT_PREFIX, DeviceType, PushSubscription
from .user import User

__all__ = [
    "APNS_ENDPOINT_PREFIX",
    "CleanupReport",
    "DeliveryResult",
    "DeviceType",
    "Notification",
    "NotificationFilters",
    "NotificationRealtimeEvent",
    "NotificationRequest",
    "NotificationScope",
    "NotificationStats",
    "NotificationType",
    "PushPayload",
    "PushSubscription",
    "SuperRole",
    "User",
]
