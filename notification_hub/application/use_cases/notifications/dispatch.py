"""Creation of notifications and hand-off to detached push fan-out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import timedelta
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notification_hub.config import Settings
from notification_hub.domain.entities import (
    DeliveryResult,
    Notification,
    NotificationRequest,
    NotificationScope,
)
from notification_hub.domain.errors import (
    NotificationPersistenceError,
    NotificationValidationError,
)
from notification_hub.infrastructure.background import (
    BackgroundTaskRunner,
    background_runner,
)
from notification_hub.infrastructure.repositories import NotificationRepository
from notification_hub.utils import now_in_app_timezone

from .delivery import PushDeliveryEngine
from .validation import validate_notification_request

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Persist notifications and trigger best-effort push delivery.

    The caller gets the stored notification back as soon as the row is
    committed. Push fan-out runs on the background runner and its outcome
    never reaches the caller.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        delivery_engine: PushDeliveryEngine,
        settings: Settings,
        *,
        runner: BackgroundTaskRunner = background_runner,
        clock: Callable = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self._delivery_engine = delivery_engine
        self._settings = settings
        self._runner = runner
        self._clock = clock

    def send_notification(
        self, request: NotificationRequest, *, skip_push: bool = False
    ) -> Notification:
        """Validate, persist and schedule push delivery for ``request``."""

        request = validate_notification_request(request)
        now = self._clock()
        expires_in_days = (
            request.expires_in_days
            if request.expires_in_days is not None
            else self._settings.notification_default_expiry_days
        )
        notification = Notification(
            id=None,
            type=request.type,
            scope=request.scope,
            title=request.title,
            category=request.category,
            user_id=request.user_id,
            team_id=request.team_id,
            super_role=request.super_role,
            avatar_url=request.avatar_url,
            metadata=request.metadata or {},
            is_unread=True,
            is_archived=False,
            created_at=now,
            expires_at=now + timedelta(days=expires_in_days),
        )

        with self._session_factory() as session:
            try:
                saved = NotificationRepository(session).create(notification)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Error creating notification")
                raise NotificationPersistenceError(
                    f"Failed to send notification: {exc}"
                ) from exc

        logger.info("Notification created: %s (%s)", saved.id, saved.scope)
        if not skip_push:
            self._schedule_fan_out(saved)
        return saved

    def send_notification_batch(
        self, requests: Iterable[NotificationRequest], *, skip_push: bool = False
    ) -> list[Notification]:
        """Dispatch each request independently and return the successes."""

        results: list[Notification] = []
        failures = 0
        for index, request in enumerate(requests):
            try:
                results.append(self.send_notification(request, skip_push=skip_push))
            except (NotificationValidationError, NotificationPersistenceError) as exc:
                failures += 1
                logger.error("Failed to send notification %d in batch: %s", index, exc)
        if failures:
            logger.warning(
                "Batch dispatch finished with %d failures and %d successes",
                failures,
                len(results),
            )
        return results

    def send_user_notification(
        self, user_id: str, **fields: Any
    ) -> Notification:
        return self._send_scoped(NotificationScope.USER, user_id=user_id, **fields)

    def send_team_notification(
        self, team_id: str, **fields: Any
    ) -> Notification:
        return self._send_scoped(NotificationScope.TEAM, team_id=team_id, **fields)

    def send_super_notification(
        self, super_role: str, **fields: Any
    ) -> Notification:
        return self._send_scoped(NotificationScope.SUPER, super_role=super_role, **fields)

    async def send_push_for_notification(self, notification_id: str) -> dict[str, Any]:
        """Run push delivery for an existing notification and report the outcome.

        Failures are reported in the returned mapping and never raised.
        """

        try:
            with self._session_factory() as session:
                notification = NotificationRepository(session).get(notification_id)
        except SQLAlchemyError as exc:
            logger.exception("Error loading notification %s for push", notification_id)
            return {"success": False, "message": str(exc)}
        if notification is None:
            return {"success": False, "message": "Notification not found"}

        try:
            result = await self._wait_detached(self._delivery_engine.deliver, notification)
        except Exception as exc:
            logger.exception("Error sending push for notification %s", notification_id)
            return {"success": False, "message": str(exc)}
        return {
            "success": True,
            "message": (
                f"Push sent to {notification.scope.lower()}: "
                f"{result.sent} sent, {result.failed} failed"
            ),
            "sent": result.sent,
            "failed": result.failed,
        }

    async def send_test_push(self, user_id: str) -> DeliveryResult:
        """Push a synthetic notification to every active device of ``user_id``."""

        return await self._wait_detached(self._delivery_engine.send_test_push, user_id)

    def get_vapid_public_key(self) -> str | None:
        return self._settings.vapid_public_key or None

    async def aclose(self) -> None:
        """Release transport connections held on the runner loop."""

        await self._wait_detached(self._delivery_engine.aclose)

    def _send_scoped(
        self,
        scope: NotificationScope,
        *,
        type: str,
        title: str,
        category: str,
        skip_push: bool = False,
        **fields: Any,
    ) -> Notification:
        request = NotificationRequest(
            type=type, scope=scope.value, title=title, category=category, **fields
        )
        return self.send_notification(request, skip_push=skip_push)

    async def _wait_detached(self, func: Callable, *args: Any) -> Any:
        # Transports keep connections bound to the runner loop.
        return await asyncio.wrap_future(self._runner.spawn(func, *args))

    def _schedule_fan_out(self, notification: Notification) -> None:
        try:
            self._runner.spawn(self._fan_out, notification)
        except RuntimeError:
            logger.exception(
                "Failed to schedule push delivery for notification %s", notification.id
            )

    async def _fan_out(self, notification: Notification) -> DeliveryResult | None:
        try:
            return await self._delivery_engine.deliver(notification)
        except Exception:
            logger.exception(
                "Push delivery failed for notification %s", notification.id
            )
            return None


__all__ = ["NotificationDispatcher"]
