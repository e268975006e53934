"""Use case for deactivating a push endpoint."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from notification_hub.infrastructure.repositories import PushSubscriptionRepository
from notification_hub.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def unsubscribe_from_push(
    session: Session, endpoint: str, *, now: datetime | None = None
) -> bool:
    """Deactivate the subscription with ``endpoint``.

    Returns ``False`` when no subscription uses the endpoint.
    """

    repository = PushSubscriptionRepository(session)
    deactivated = repository.deactivate_by_endpoint(endpoint, now or now_in_app_timezone())
    if deactivated:
        logger.info("Push subscription deactivated for endpoint %s", endpoint)
    return deactivated
