"""Aggregate application use cases."""

from .notifications import NotificationDispatcher, PushDeliveryEngine
from .push_subscriptions import subscribe_to_apns, subscribe_to_push

__all__ = [
    "NotificationDispatcher",
    "PushDeliveryEngine",
    "subscribe_to_apns",
    "subscribe_to_push",
]
