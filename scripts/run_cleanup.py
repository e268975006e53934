"""Run notification retention cleanup and purge stale push subscriptions."""

from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from notification_hub.application.use_cases.notifications import (
    get_notification_stats,
    run_full_cleanup,
)
from notification_hub.application.use_cases.push_subscriptions import (
    cleanup_old_subscriptions,
)
from notification_hub.config import get_settings
from notification_hub.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the cleanup run."""

    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Delete expired, stale archived and stale read notifications.",
    )
    parser.add_argument(
        "--archived-days",
        type=int,
        default=settings.archived_retention_days,
        help="Delete archived notifications older than this many days",
    )
    parser.add_argument(
        "--read-days",
        type=int,
        default=settings.read_retention_days,
        help="Delete read notifications older than this many days",
    )
    parser.add_argument(
        "--subscription-days",
        type=int,
        default=settings.subscription_retention_days,
        help="Delete push subscriptions unused for this many days",
    )
    parser.add_argument(
        "--skip-subscriptions",
        action="store_true",
        help="Only clean notifications",
    )
    return parser.parse_args()


def main() -> None:
    """Run the cleanup and print the per-category counts."""

    args = parse_args()
    logging.basicConfig(level=get_settings().log_level.upper())

    initialize_database()

    session = SessionLocal()
    try:
        report = run_full_cleanup(
            session,
            archived_older_than_days=args.archived_days,
            read_older_than_days=args.read_days,
        )
        deleted_subscriptions = (
            0
            if args.skip_subscriptions
            else cleanup_old_subscriptions(session, args.subscription_days)
        )
        stats = get_notification_stats(session)
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"Invalid cleanup arguments: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Database error during cleanup: {exc}") from exc
    else:
        print(
            "Cleanup finished:\n"
            f"  Expired deleted: {report.expired}\n"
            f"  Archived deleted: {report.archived}\n"
            f"  Read deleted: {report.read}\n"
            f"  Subscriptions deleted: {deleted_subscriptions}\n"
            f"  Remaining: {stats.total} ({stats.unread} unread, {stats.archived} archived)"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
