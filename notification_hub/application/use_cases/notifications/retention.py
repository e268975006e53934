"""Retention cleanup and operational statistics for notifications."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import and_
from sqlalchemy.orm import Session

from notification_hub.domain.entities import CleanupReport, NotificationStats
from notification_hub.infrastructure.models import NotificationModel
from notification_hub.infrastructure.repositories import NotificationRepository
from notification_hub.utils import (
    ensure_app_naive_datetime,
    naive_days_before,
    now_in_app_timezone,
)

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVED_RETENTION_DAYS = 90
DEFAULT_READ_RETENTION_DAYS = 60


def _validate_days(older_than_days: int) -> None:
    if older_than_days < 0:
        raise ValueError("older_than_days must not be negative")


def cleanup_expired_notifications(session: Session, *, now: datetime | None = None) -> int:
    """Delete every notification whose expiry has passed."""

    cutoff = ensure_app_naive_datetime(now or now_in_app_timezone())
    deleted = NotificationRepository(session).delete_matching(
        NotificationModel.expires_at <= cutoff
    )
    logger.info("Deleted %d expired notifications", deleted)
    return deleted


def cleanup_archived_notifications(
    session: Session,
    older_than_days: int = DEFAULT_ARCHIVED_RETENTION_DAYS,
    *,
    now: datetime | None = None,
) -> int:
    _validate_days(older_than_days)
    cutoff = naive_days_before(now or now_in_app_timezone(), older_than_days)
    deleted = NotificationRepository(session).delete_matching(
        and_(
            NotificationModel.is_archived.is_(True),
            NotificationModel.created_at < cutoff,
        )
    )
    logger.info(
        "Deleted %d archived notifications older than %d days", deleted, older_than_days
    )
    return deleted


def cleanup_read_notifications(
    session: Session,
    older_than_days: int = DEFAULT_READ_RETENTION_DAYS,
    *,
    now: datetime | None = None,
) -> int:
    """Delete read, non-archived notifications created before the cutoff."""

    _validate_days(older_than_days)
    cutoff = naive_days_before(now or now_in_app_timezone(), older_than_days)
    deleted = NotificationRepository(session).delete_matching(
        and_(
            NotificationModel.is_unread.is_(False),
            NotificationModel.is_archived.is_(False),
            NotificationModel.created_at < cutoff,
        )
    )
    logger.info(
        "Deleted %d read notifications older than %d days", deleted, older_than_days
    )
    return deleted


def run_full_cleanup(
    session: Session,
    *,
    archived_older_than_days: int = DEFAULT_ARCHIVED_RETENTION_DAYS,
    read_older_than_days: int = DEFAULT_READ_RETENTION_DAYS,
    now: datetime | None = None,
) -> CleanupReport:
    """Run the three cleanups in order and report per-category counts."""

    now = now or now_in_app_timezone()
    logger.info("Starting full notification cleanup")
    report = CleanupReport(
        expired=cleanup_expired_notifications(session, now=now),
        archived=cleanup_archived_notifications(
            session, archived_older_than_days, now=now
        ),
        read=cleanup_read_notifications(session, read_older_than_days, now=now),
    )
    logger.info(
        "Cleanup complete: %d expired, %d archived, %d read (%d total)",
        report.expired,
        report.archived,
        report.read,
        report.total,
    )
    return report


def get_notification_stats(
    session: Session, *, now: datetime | None = None
) -> NotificationStats:
    return NotificationRepository(session).stats(now or now_in_app_timezone())


__all__ = [
    "DEFAULT_ARCHIVED_RETENTION_DAYS",
    "DEFAULT_READ_RETENTION_DAYS",
    "cleanup_archived_notifications",
    "cleanup_expired_notifications",
    "cleanup_read_notifications",
    "get_notification_stats",
    "run_full_cleanup",
]
