"""Repository implementations for infrastructure layer."""

from .notification_repository import NotificationRepository
from .push_subscription_repository import PushSubscriptionRepository
from .user_repository import TeamMembershipRepository, UserRepository

__all__ = [
    "NotificationRepository",
    "PushSubscriptionRepository",
    "TeamMembershipRepository",
    "UserRepository",
]
