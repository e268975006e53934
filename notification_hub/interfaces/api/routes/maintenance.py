"""Operational endpoints for retention cleanup and statistics."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from notification_hub.application.use_cases.notifications import (
    get_notification_stats,
    run_full_cleanup,
)
from notification_hub.application.use_cases.push_subscriptions import (
    cleanup_old_subscriptions,
)
from notification_hub.config import Settings
from notification_hub.infrastructure.database import get_db
from notification_hub.interfaces.api.dependencies import get_app_settings
from notification_hub.interfaces.api.routes_helpers import translate_domain_errors
from notification_hub.interfaces.api.schemas import (
    CleanupReportRead,
    NotificationStatsRead,
    SubscriptionCleanupRead,
)

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/cleanup", response_model=CleanupReportRead)
def cleanup_notifications(
    archived_older_than_days: int | None = Query(None, ge=0),
    read_older_than_days: int | None = Query(None, ge=0),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> CleanupReportRead:
    """Delete expired, stale archived and stale read notifications."""

    with translate_domain_errors():
        report = run_full_cleanup(
            db,
            archived_older_than_days=(
                archived_older_than_days
                if archived_older_than_days is not None
                else settings.archived_retention_days
            ),
            read_older_than_days=(
                read_older_than_days
                if read_older_than_days is not None
                else settings.read_retention_days
            ),
        )
    return CleanupReportRead(
        expired=report.expired,
        archived=report.archived,
        read=report.read,
        total=report.total,
    )


@router.get("/stats", response_model=NotificationStatsRead)
def read_stats(db: Session = Depends(get_db)) -> NotificationStatsRead:
    with translate_domain_errors():
        stats = get_notification_stats(db)
    return NotificationStatsRead.model_validate(stats)


@router.post("/subscriptions/cleanup", response_model=SubscriptionCleanupRead)
def cleanup_subscriptions(
    older_than_days: int | None = Query(None, ge=0),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> SubscriptionCleanupRead:
    days = (
        older_than_days
        if older_than_days is not None
        else settings.subscription_retention_days
    )
    with translate_domain_errors():
        deleted = cleanup_old_subscriptions(db, days)
    return SubscriptionCleanupRead(deleted=deleted)
