"""Exceptions raised by the notification domain."""

from __future__ import annotations


class NotificationValidationError(ValueError):
    """Raised when a notification request is inconsistent with its scope."""


class NotificationNotFoundError(LookupError):
    """Raised when a notification id does not exist."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(f"Notification with id {notification_id} not found")
        self.notification_id = notification_id


class NotificationPersistenceError(RuntimeError):
    """Raised when the store rejects or cannot accept a notification write."""


class PushDeliveryError(Exception):
    """Raised by a transport when a single push message cannot be delivered."""

    GONE_STATUS_CODES = frozenset({404, 410})

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_gone(self) -> bool:
        """``True`` when the endpoint is permanently unreachable."""

        return self.status_code in self.GONE_STATUS_CODES


__all__ = [
    "NotificationNotFoundError",
    "NotificationPersistenceError",
    "NotificationValidationError",
    "PushDeliveryError",
]
