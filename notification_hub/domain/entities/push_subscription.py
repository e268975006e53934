"""Domain entity representing a push delivery endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class DeviceType(str, Enum):
    """Device families; each one maps onto a single push transport."""

    WEB = "web"
    ANDROID = "android"
    IOS = "ios"
    MACOS = "macos"

    @property
    def uses_apns(self) -> bool:
        return self in (DeviceType.IOS, DeviceType.MACOS)


APNS_ENDPOINT_PREFIX = "apns://"


@dataclass
class PushSubscription:
    """A registered device or browser able to receive push messages."""

    id: str | None
    user_id: str
    endpoint: str
    p256dh: str
    auth: str
    device_type: str
    is_active: bool = True
    apns_token: str | None = None
    apns_bundle_id: str | None = None
    apns_environment: str | None = None
    user_agent: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_used_at: datetime | None = None


__all__ = ["APNS_ENDPOINT_PREFIX", "DeviceType", "PushSubscription"]
