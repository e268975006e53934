"""Persistence layer for push subscription data."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from notification_hub.domain.entities import PushSubscription
from notification_hub.infrastructure.models import PushSubscriptionModel
from notification_hub.utils import ensure_app_naive_datetime, ensure_app_timezone


class PushSubscriptionRepository:
    """Provide upsert, lookup and lifecycle operations for push endpoints."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_endpoint(self, endpoint: str) -> PushSubscription | None:
        model = self._get_model(endpoint=endpoint)
        return self._to_entity(model) if model else None

    def list_active_for_user(self, user_id: str) -> Sequence[PushSubscription]:
        query = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.user_id == user_id)
            .filter(PushSubscriptionModel.is_active.is_(True))
            .order_by(PushSubscriptionModel.created_at.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_for_user(self, user_id: str) -> Sequence[PushSubscription]:
        query = self.session.query(PushSubscriptionModel).filter(
            PushSubscriptionModel.user_id == user_id
        )
        return [self._to_entity(model) for model in query.all()]

    def create(self, subscription: PushSubscription) -> PushSubscription:
        model = PushSubscriptionModel()
        self._apply_entity_to_model(model, subscription, include_creation_fields=True)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, subscription: PushSubscription) -> PushSubscription:
        if subscription.id is None:
            raise ValueError("Push subscription id is required for updates")
        model = self.session.get(PushSubscriptionModel, subscription.id)
        if model is None:
            raise ValueError(f"Push subscription with id {subscription.id} not found")
        self._apply_entity_to_model(model, subscription, include_creation_fields=False)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def touch(self, subscription_id: str, used_at: datetime) -> None:
        """Record a successful send on the subscription."""

        self.session.query(PushSubscriptionModel).filter(
            PushSubscriptionModel.id == subscription_id
        ).update(
            {PushSubscriptionModel.last_used_at: ensure_app_naive_datetime(used_at)},
            synchronize_session=False,
        )
        self.session.commit()

    def deactivate(self, subscription_id: str, at: datetime) -> bool:
        count = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.id == subscription_id)
            .update(
                {
                    PushSubscriptionModel.is_active: False,
                    PushSubscriptionModel.updated_at: ensure_app_naive_datetime(at),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return bool(count)

    def deactivate_by_endpoint(self, endpoint: str, at: datetime) -> bool:
        count = (
            self.session.query(PushSubscriptionModel)
            .filter(PushSubscriptionModel.endpoint == endpoint)
            .update(
                {
                    PushSubscriptionModel.is_active: False,
                    PushSubscriptionModel.updated_at: ensure_app_naive_datetime(at),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return bool(count)

    def delete_stale(self, cutoff: datetime) -> int:
        """Delete inactive rows untouched since ``cutoff`` and rows unused since then."""

        naive_cutoff = ensure_app_naive_datetime(cutoff)
        count = (
            self.session.query(PushSubscriptionModel)
            .filter(
                or_(
                    and_(
                        PushSubscriptionModel.is_active.is_(False),
                        PushSubscriptionModel.updated_at < naive_cutoff,
                    ),
                    PushSubscriptionModel.last_used_at < naive_cutoff,
                )
            )
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return count

    def _get_model(self, **filters) -> PushSubscriptionModel | None:
        return self.session.query(PushSubscriptionModel).filter_by(**filters).first()

    @staticmethod
    def _apply_entity_to_model(
        model: PushSubscriptionModel,
        subscription: PushSubscription,
        *,
        include_creation_fields: bool,
    ) -> None:
        if include_creation_fields:
            if subscription.id:
                model.id = subscription.id
            model.created_at = ensure_app_naive_datetime(subscription.created_at)
        model.user_id = subscription.user_id
        model.endpoint = subscription.endpoint
        model.p256dh = subscription.p256dh
        model.auth = subscription.auth
        model.apns_token = subscription.apns_token
        model.apns_bundle_id = subscription.apns_bundle_id
        model.apns_environment = subscription.apns_environment
        model.device_type = subscription.device_type
        model.is_active = subscription.is_active
        model.user_agent = subscription.user_agent
        model.updated_at = ensure_app_naive_datetime(subscription.updated_at)
        model.last_used_at = ensure_app_naive_datetime(subscription.last_used_at)

    @staticmethod
    def _to_entity(model: PushSubscriptionModel) -> PushSubscription:
        return PushSubscription(
            id=model.id,
            user_id=model.user_id,
            endpoint=model.endpoint,
            p256dh=model.p256dh,
            auth=model.auth,
            device_type=model.device_type,
            is_active=model.is_active,
            apns_token=model.apns_token,
            apns_bundle_id=model.apns_bundle_id,
            apns_environment=model.apns_environment,
            user_agent=model.user_agent,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
            last_used_at=ensure_app_timezone(model.last_used_at),
        )


__all__ = ["PushSubscriptionRepository"]
