"""Push fan-out of persisted notifications to registered devices."""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Iterable
from typing import Callable

import anyio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notification_hub.config import Settings
from notification_hub.domain.entities import (
    DeliveryResult,
    Notification,
    NotificationScope,
    NotificationType,
    PushPayload,
    PushSubscription,
)
from notification_hub.domain.errors import PushDeliveryError
from notification_hub.infrastructure.push import PushTransports
from notification_hub.infrastructure.repositories import (
    PushSubscriptionRepository,
    TeamMembershipRepository,
    UserRepository,
)
from notification_hub.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

_HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
DEFAULT_PUSH_BODY = "New Notification"


def strip_html(text: str | None) -> str:
    """Return ``text`` without markup, suitable for a push body."""

    if not text:
        return ""
    return html.unescape(_HTML_TAG_PATTERN.sub("", text)).strip()


def build_push_payload(notification: Notification, settings: Settings) -> PushPayload:
    metadata = notification.metadata or {}
    return PushPayload(
        title=notification.category or settings.push_default_title,
        body=strip_html(notification.title) or DEFAULT_PUSH_BODY,
        icon=notification.avatar_url or settings.push_default_icon,
        badge=settings.push_default_icon,
        tag=notification.id or "",
        data={
            "notificationId": notification.id,
            "category": notification.category,
            "type": notification.type,
            "metadata": metadata,
            "url": metadata.get("url") or "/",
        },
    )


class PushDeliveryEngine:
    """Resolve recipients of a notification and push to their devices.

    Every subscription is attempted independently: a failure on one endpoint
    never prevents the others from being tried.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        transports: PushTransports,
        settings: Settings,
        *,
        clock: Callable = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self._transports = transports
        self._settings = settings
        self._clock = clock

    def resolve_recipients(self, session: Session, notification: Notification) -> list[str]:
        """Return the user ids that should receive ``notification``.

        Team rosters and super-role holders are read at delivery time so
        membership changes apply to later fan-outs only.
        """

        if notification.scope == NotificationScope.USER.value:
            return [notification.user_id] if notification.user_id else []
        if notification.scope == NotificationScope.TEAM.value:
            if not notification.team_id:
                return []
            return list(TeamMembershipRepository(session).list_user_ids(notification.team_id))
        if notification.scope == NotificationScope.SUPER.value:
            if not notification.super_role:
                return []
            return UserRepository(session).list_ids_by_super_roles([notification.super_role])
        return []

    async def deliver(self, notification: Notification) -> DeliveryResult:
        """Push ``notification`` to every active device of its audience."""

        with self._session_factory() as session:
            user_ids = self.resolve_recipients(session, notification)
        if not user_ids:
            logger.info(
                "No recipients for %s notification %s", notification.scope, notification.id
            )
            return DeliveryResult()

        result = await self.send_to_users(user_ids, notification)
        logger.info(
            "Push for %s notification %s to %d users: %d sent, %d failed",
            notification.scope,
            notification.id,
            len(user_ids),
            result.sent,
            result.failed,
        )
        return result

    async def send_to_users(
        self, user_ids: Iterable[str], notification: Notification
    ) -> DeliveryResult:
        total = DeliveryResult()

        async def _send(user_id: str) -> None:
            total.merge(await self.send_to_user(user_id, notification))

        async with anyio.create_task_group() as task_group:
            for user_id in dict.fromkeys(user_ids):
                task_group.start_soon(_send, user_id)
        return total

    async def send_to_user(
        self, user_id: str, notification: Notification
    ) -> DeliveryResult:
        """Send ``notification`` to every active subscription of ``user_id``."""

        result = DeliveryResult()
        # No pooled connection may be held across the sends below.
        try:
            with self._session_factory() as session:
                subscriptions = PushSubscriptionRepository(session).list_active_for_user(
                    user_id
                )
        except SQLAlchemyError as exc:
            logger.exception("Error loading push subscriptions for user %s", user_id)
            result.errors.append(str(exc))
            return result
        if not subscriptions:
            logger.debug("No active push subscriptions for user %s", user_id)
            return result

        payload = build_push_payload(notification, self._settings)
        async with anyio.create_task_group() as task_group:
            for subscription in subscriptions:
                task_group.start_soon(self._send_one, subscription, payload, result)
        return result

    async def send_test_push(self, user_id: str) -> DeliveryResult:
        now = self._clock()
        notification = Notification(
            id=f"test-{int(now.timestamp())}",
            type=NotificationType.SYSTEM.value,
            scope=NotificationScope.USER.value,
            title="This is a test notification from Notification Hub",
            category="Test Notification",
            user_id=user_id,
            metadata={"test": True},
            created_at=now,
        )
        return await self.send_to_user(user_id, notification)

    async def aclose(self) -> None:
        await self._transports.aclose()

    async def _send_one(
        self,
        subscription: PushSubscription,
        payload: PushPayload,
        result: DeliveryResult,
    ) -> None:
        transport = self._transports.for_subscription(subscription)
        try:
            await transport.send(subscription, payload)
        except PushDeliveryError as exc:
            result.failed += 1
            if exc.is_gone:
                result.deactivated += 1
                logger.info(
                    "Push endpoint gone (%s), deactivating subscription %s",
                    exc.status_code,
                    subscription.id,
                )
                self._record("deactivate", subscription)
                return
            result.errors.append(str(exc))
            logger.warning(
                "Failed to send %s push to subscription %s: %s",
                transport.name,
                subscription.id,
                exc,
            )
            return
        except Exception as exc:
            result.failed += 1
            result.errors.append(str(exc) or exc.__class__.__name__)
            logger.exception(
                "Unexpected error sending %s push to subscription %s",
                transport.name,
                subscription.id,
            )
            return

        result.sent += 1
        self._record("touch", subscription)

    def _record(self, operation: str, subscription: PushSubscription) -> None:
        try:
            with self._session_factory() as session:
                repository = PushSubscriptionRepository(session)
                getattr(repository, operation)(subscription.id, self._clock())
        except SQLAlchemyError:
            logger.exception("Failed to %s push subscription %s", operation, subscription.id)


__all__ = ["DEFAULT_PUSH_BODY", "PushDeliveryEngine", "build_push_payload", "strip_html"]
