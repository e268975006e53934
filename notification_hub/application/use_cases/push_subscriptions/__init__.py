"""Use cases for managing push subscriptions."""

from .cleanup_old_subscriptions import cleanup_old_subscriptions
from .device_type import detect_device_type
from .list_user_subscriptions import list_user_subscriptions
from .subscribe_to_apns import subscribe_to_apns
from .subscribe_to_push import subscribe_to_push
from .unsubscribe_from_push import unsubscribe_from_push

__all__ = [
    "cleanup_old_subscriptions",
    "detect_device_type",
    "list_user_subscriptions",
    "subscribe_to_apns",
    "subscribe_to_push",
    "unsubscribe_from_push",
]
