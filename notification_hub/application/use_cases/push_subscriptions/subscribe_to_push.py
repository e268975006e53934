"""Use case for registering a Web Push subscription."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notification_hub.domain.entities import PushSubscription
from notification_hub.infrastructure.repositories import PushSubscriptionRepository
from notification_hub.utils import now_in_app_timezone

from .device_type import resolve_device_type

logger = logging.getLogger(__name__)


def upsert_subscription(
    session: Session, subscription: PushSubscription
) -> PushSubscription:
    """Insert ``subscription`` or refresh the row sharing its endpoint.

    An existing row is reassigned to the caller, reactivated and gets the
    new keys; its creation time is preserved.
    """

    repository = PushSubscriptionRepository(session)
    existing = repository.get_by_endpoint(subscription.endpoint)
    if existing is None:
        try:
            created = repository.create(subscription)
        except IntegrityError:
            session.rollback()
            existing = repository.get_by_endpoint(subscription.endpoint)
            if existing is None:
                raise
        else:
            logger.info(
                "Push subscription created: %s (%s) for user %s",
                created.id,
                created.device_type,
                created.user_id,
            )
            return created

    refreshed = repository.update(
        replace(subscription, id=existing.id, created_at=existing.created_at)
    )
    logger.info(
        "Push subscription refreshed: %s (%s) for user %s",
        refreshed.id,
        refreshed.device_type,
        refreshed.user_id,
    )
    return refreshed


def subscribe_to_push(
    session: Session,
    user_id: str,
    *,
    endpoint: str,
    p256dh: str,
    auth: str,
    user_agent: str | None = None,
    device_type: str | None = None,
    now: datetime | None = None,
) -> PushSubscription:
    """Register or refresh the browser endpoint of ``user_id``."""

    if not user_id:
        raise ValueError("user_id is required")
    if not endpoint or not p256dh or not auth:
        raise ValueError("endpoint, p256dh and auth are required")

    now = now or now_in_app_timezone()
    subscription = PushSubscription(
        id=None,
        user_id=user_id,
        endpoint=endpoint,
        p256dh=p256dh,
        auth=auth,
        device_type=resolve_device_type(device_type, user_agent),
        is_active=True,
        user_agent=user_agent,
        created_at=now,
        updated_at=now,
        last_used_at=now,
    )
    return upsert_subscription(session, subscription)
