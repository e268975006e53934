"""Use cases for dispatching, querying and retaining notifications."""

from .delivery import PushDeliveryEngine, build_push_payload, strip_html
from .dispatch import NotificationDispatcher
from .queries import (
    MAX_LIST_LIMIT,
    archive_notification,
    delete_notification,
    get_notification,
    get_unread_count,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
    resolve_target,
    unarchive_notification,
)
from .retention import (
    cleanup_archived_notifications,
    cleanup_expired_notifications,
    cleanup_read_notifications,
    get_notification_stats,
    run_full_cleanup,
)
from .validation import normalize_scope, validate_notification_request

__all__ = [
    "MAX_LIST_LIMIT",
    "NotificationDispatcher",
    "PushDeliveryEngine",
    "archive_notification",
    "build_push_payload",
    "cleanup_archived_notifications",
    "cleanup_expired_notifications",
    "cleanup_read_notifications",
    "delete_notification",
    "get_notification",
    "get_notification_stats",
    "get_unread_count",
    "list_notifications",
    "mark_all_as_read",
    "mark_as_read",
    "normalize_scope",
    "resolve_target",
    "run_full_cleanup",
    "strip_html",
    "unarchive_notification",
    "validate_notification_request",
]
