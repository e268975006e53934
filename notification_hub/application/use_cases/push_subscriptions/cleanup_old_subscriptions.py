"""Use case for purging stale push subscriptions."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from notification_hub.infrastructure.repositories import PushSubscriptionRepository
from notification_hub.utils import naive_days_before, now_in_app_timezone

logger = logging.getLogger(__name__)

DEFAULT_SUBSCRIPTION_RETENTION_DAYS = 90


def cleanup_old_subscriptions(
    session: Session,
    older_than_days: int = DEFAULT_SUBSCRIPTION_RETENTION_DAYS,
    *,
    now: datetime | None = None,
) -> int:
    """Delete inactive subscriptions and subscriptions unused for too long."""

    if older_than_days < 0:
        raise ValueError("older_than_days must not be negative")
    cutoff = naive_days_before(now or now_in_app_timezone(), older_than_days)
    deleted = PushSubscriptionRepository(session).delete_stale(cutoff)
    logger.info(
        "Deleted %d push subscriptions older than %d days", deleted, older_than_days
    )
    return deleted
