"""Use cases for reading and updating the state of stored notifications."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_hub.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationScope,
)
from notification_hub.domain.errors import NotificationValidationError
from notification_hub.infrastructure.repositories import NotificationRepository

from .validation import normalize_scope, normalize_super_role

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 200


def resolve_target(scope: str, target_id: str) -> tuple[str, str]:
    """Return the normalized ``(scope, target_id)`` pair of a channel."""

    scope = normalize_scope(scope)
    target_id = (target_id or "").strip()
    if not target_id:
        raise NotificationValidationError("target_id is required")
    if scope == NotificationScope.SUPER.value:
        target_id = normalize_super_role(target_id)
    return scope, target_id


def list_notifications(
    session: Session,
    scope: str,
    target_id: str,
    filters: NotificationFilters | None = None,
) -> Sequence[Notification]:
    """Return notifications addressed to the target, newest first."""

    scope, target_id = resolve_target(scope, target_id)
    filters = filters or NotificationFilters()
    if filters.limit <= 0 or filters.limit > MAX_LIST_LIMIT:
        raise NotificationValidationError(
            f"limit must be between 1 and {MAX_LIST_LIMIT}"
        )
    if filters.offset < 0:
        raise NotificationValidationError("offset must not be negative")
    return NotificationRepository(session).list_for_target(scope, target_id, filters)


def get_notification(session: Session, notification_id: str) -> Notification | None:
    return NotificationRepository(session).get(notification_id)


def get_unread_count(session: Session, scope: str, target_id: str) -> int:
    scope, target_id = resolve_target(scope, target_id)
    return NotificationRepository(session).count_unread(scope, target_id)


def mark_as_read(session: Session, notification_id: str) -> Notification:
    return NotificationRepository(session).set_flags(notification_id, is_unread=False)


def mark_all_as_read(
    session: Session,
    *,
    user_id: str | None = None,
    team_id: str | None = None,
    super_role: str | None = None,
) -> int:
    """Mark every unread notification of exactly one target as read.

    Returns the number of notifications that changed state.
    """

    targets = {
        NotificationScope.USER.value: user_id,
        NotificationScope.TEAM.value: team_id,
        NotificationScope.SUPER.value: super_role,
    }
    provided = [(scope, value) for scope, value in targets.items() if value]
    if len(provided) != 1:
        raise NotificationValidationError(
            "Exactly one of user_id, team_id or super_role must be provided"
        )
    scope, target_id = resolve_target(*provided[0])
    count = NotificationRepository(session).mark_all_read(scope, target_id)
    logger.info("Marked %d notifications as read for %s %s", count, scope, target_id)
    return count


def archive_notification(session: Session, notification_id: str) -> Notification:
    return NotificationRepository(session).set_flags(notification_id, is_archived=True)


def unarchive_notification(session: Session, notification_id: str) -> Notification:
    return NotificationRepository(session).set_flags(notification_id, is_archived=False)


def delete_notification(session: Session, notification_id: str) -> None:
    """Permanently remove a notification."""

    NotificationRepository(session).delete(notification_id)
    logger.info("Notification deleted: %s", notification_id)


__all__ = [
    "MAX_LIST_LIMIT",
    "archive_notification",
    "delete_notification",
    "get_notification",
    "get_unread_count",
    "list_notifications",
    "mark_all_as_read",
    "mark_as_read",
    "resolve_target",
    "unarchive_notification",
]
