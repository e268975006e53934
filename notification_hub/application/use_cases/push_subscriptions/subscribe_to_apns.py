"""Use case for registering a native Apple device."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Session

from notification_hub.config import Settings, get_settings
from notification_hub.domain.entities import (
    APNS_ENDPOINT_PREFIX,
    DeviceType,
    PushSubscription,
)
from notification_hub.utils import now_in_app_timezone

from .device_type import resolve_device_type
from .subscribe_to_push import upsert_subscription

APNS_ENVIRONMENTS = ("production", "sandbox")


def subscribe_to_apns(
    session: Session,
    user_id: str,
    apns_token: str,
    *,
    bundle_id: str | None = None,
    environment: str | None = None,
    user_agent: str | None = None,
    device_type: str | None = None,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> PushSubscription:
    """Register an APNs device token under a synthetic ``apns://`` endpoint."""

    if not user_id:
        raise ValueError("user_id is required")
    apns_token = (apns_token or "").strip()
    if not apns_token:
        raise ValueError("apns_token is required")
    environment = (environment or "production").lower()
    if environment not in APNS_ENVIRONMENTS:
        raise ValueError("environment must be either production or sandbox")

    resolved_device = resolve_device_type(device_type or DeviceType.IOS.value, user_agent)
    if not DeviceType(resolved_device).uses_apns:
        raise ValueError("APNs subscriptions require an ios or macos device type")

    settings = settings or get_settings()
    now = now or now_in_app_timezone()
    subscription = PushSubscription(
        id=None,
        user_id=user_id,
        endpoint=f"{APNS_ENDPOINT_PREFIX}{apns_token}",
        p256dh="",
        auth="",
        device_type=resolved_device,
        is_active=True,
        apns_token=apns_token,
        apns_bundle_id=bundle_id or settings.apns_bundle_id,
        apns_environment=environment,
        user_agent=user_agent,
        created_at=now,
        updated_at=now,
        last_used_at=now,
    )
    return upsert_subscription(session, subscription)
