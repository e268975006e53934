"""Domain entities describing scoped notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationScope(str, Enum):
    """Addressing mode of a notification."""

    USER = "USER"
    TEAM = "TEAM"
    SUPER = "SUPER"


class SuperRole(str, Enum):
    """Privileged roles that can receive super-scoped notifications."""

    ADMIN = "ADMIN"
    SUPPORT = "SUPPORT"


class NotificationType(str, Enum):
    """Categorical tag carried by every notification."""

    MAIL = "MAIL"
    CHAT = "CHAT"
    ORDER = "ORDER"
    PAYMENT = "PAYMENT"
    DELIVERY = "DELIVERY"
    FILE = "FILE"
    FRIEND = "FRIEND"
    PROJECT = "PROJECT"
    TAGS = "TAGS"
    SYSTEM = "SYSTEM"
    REVIEW = "REVIEW"


@dataclass
class Notification:
    """A persisted notification addressed to exactly one scope target."""

    id: str | None
    type: str
    scope: str
    title: str
    category: str
    user_id: str | None = None
    team_id: str | None = None
    super_role: str | None = None
    avatar_url: str | None = None
    metadata: dict[str, Any] | None = None
    is_unread: bool = True
    is_archived: bool = False
    created_at: datetime | None = None
    expires_at: datetime | None = None


@dataclass
class NotificationRequest:
    """Caller supplied data used to create a notification."""

    type: str
    scope: str
    title: str
    category: str
    user_id: str | None = None
    team_id: str | None = None
    super_role: str | None = None
    avatar_url: str | None = None
    metadata: dict[str, Any] | None = None
    expires_in_days: int | None = None


@dataclass
class NotificationFilters:
    """Filters accepted when listing the notifications of a target."""

    unread_only: bool = False
    archived_only: bool = False
    type: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = 50
    offset: int = 0


@dataclass
class NotificationRealtimeEvent:
    """Uniform shape of a live notification change."""

    event: str
    notification: dict[str, Any] = field(default_factory=dict)
    timestamp: str = ""


__all__ = [
    "Notification",
    "NotificationFilters",
    "NotificationRealtimeEvent",
    "NotificationRequest",
    "NotificationScope",
    "NotificationType",
    "SuperRole",
]
