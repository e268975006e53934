"""Value objects produced by push delivery and retention runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class PushPayload:
    """Transport-agnostic push message."""

    title: str
    body: str
    icon: str
    badge: str
    tag: str
    data: dict[str, Any] = field(default_factory=dict)
    require_interaction: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "body": self.body,
            "icon": self.icon,
            "badge": self.badge,
            "tag": self.tag,
            "data": self.data,
            "requireInteraction": self.require_interaction,
        }


@dataclass
class DeliveryResult:
    """Aggregate outcome of a fan-out. Advisory only.

    ``failed`` counts every attempt that did not deliver; ``deactivated`` is
    the subset that hit a gone endpoint and carries no error message.
    """

    sent: int = 0
    failed: int = 0
    deactivated: int = 0
    errors: list[str] = field(default_factory=list)

    def merge(self, other: "DeliveryResult") -> None:
        self.sent += other.sent
        self.failed += other.failed
        self.deactivated += other.deactivated
        self.errors.extend(other.errors)

    @property
    def attempted(self) -> int:
        return self.sent + self.failed


@dataclass
class CleanupReport:
    """Per-category deletion counts of a retention run."""

    expired: int = 0
    archived: int = 0
    read: int = 0

    @property
    def total(self) -> int:
        return self.expired + self.archived + self.read


@dataclass
class NotificationStats:
    """Operational counters over the notification table."""

    total: int
    unread: int
    archived: int
    expired: int


__all__ = ["CleanupReport", "DeliveryResult", "NotificationStats", "PushPayload"]
