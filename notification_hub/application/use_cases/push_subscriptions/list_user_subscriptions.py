"""Use case for listing the devices of a user."""

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_hub.domain.entities import PushSubscription
from notification_hub.infrastructure.repositories import PushSubscriptionRepository


def list_user_subscriptions(
    session: Session, user_id: str, *, active_only: bool = True
) -> Sequence[PushSubscription]:
    repository = PushSubscriptionRepository(session)
    if active_only:
        return repository.list_active_for_user(user_id)
    return repository.list_for_user(user_id)
