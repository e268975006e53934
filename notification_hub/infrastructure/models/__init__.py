"""ORM models used by the application infrastructure."""

from .notification import NotificationModel
from .push_subscription import PushSubscriptionModel
from .user import TeamMemberModel, UserModel

__all__ = [
    "NotificationModel",
    "PushSubscriptionModel",
    "TeamMemberModel",
    "UserModel",
]
