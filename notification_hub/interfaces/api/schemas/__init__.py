from .maintenance import CleanupReportRead, NotificationStatsRead, SubscriptionCleanupRead
from .notification import (
    MarkAllReadResponse,
    NotificationBase,
    NotificationBatchCreate,
    NotificationCreate,
    NotificationRead,
    PushTriggerResponse,
    UnreadCountRead,
)
from .push_subscription import (
    ApnsSubscriptionCreate,
    PushSubscriptionCreate,
    PushSubscriptionKeys,
    PushSubscriptionRead,
    PushUnsubscribeRequest,
    PushUnsubscribeResponse,
    PushTestResponse,
    VapidPublicKeyRead,
)

__all__ = [
    "ApnsSubscriptionCreate",
    "CleanupReportRead",
    "MarkAllReadResponse",
    "NotificationBase",
    "NotificationBatchCreate",
    "NotificationCreate",
    "NotificationRead",
    "NotificationStatsRead",
    "PushSubscriptionCreate",
    "PushSubscriptionKeys",
    "PushSubscriptionRead",
    "PushTriggerResponse",
    "PushUnsubscribeRequest",
    "PushUnsubscribeResponse",
    "SubscriptionCleanupRead",
    "PushTestResponse",
    "UnreadCountRead",
    "VapidPublicKeyRead",
]
