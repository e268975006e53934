"""Dispatch a sample notification to a user, team or super-role target."""

from __future__ import annotations

import argparse
import logging

import anyio

from notification_hub.application.use_cases.notifications import (
    NotificationDispatcher,
    PushDeliveryEngine,
)
from notification_hub.config import get_settings
from notification_hub.domain.entities import NotificationRequest, NotificationType
from notification_hub.domain.errors import (
    NotificationPersistenceError,
    NotificationValidationError,
)
from notification_hub.infrastructure.background import BackgroundTaskRunner
from notification_hub.infrastructure.database import SessionLocal, initialize_database
from notification_hub.infrastructure.push import build_transports


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the sample dispatch."""

    parser = argparse.ArgumentParser(
        description="Send a sample notification through the dispatch pipeline.",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--user-id", help="Deliver to a single user")
    target.add_argument("--team-id", help="Deliver to every member of a team")
    target.add_argument("--super-role", help="Deliver to holders of ADMIN or SUPPORT")
    parser.add_argument(
        "--type",
        default=NotificationType.SYSTEM.value,
        help="Notification type (default: SYSTEM)",
    )
    parser.add_argument("--title", default="<b>Hello</b> from Notification Hub")
    parser.add_argument("--category", default="Sample Notification")
    parser.add_argument(
        "--skip-push", action="store_true", help="Persist without push fan-out"
    )
    parser.add_argument(
        "--test-push",
        action="store_true",
        help="Also send a synthetic test push to --user-id",
    )
    return parser.parse_args()


def main() -> None:
    """Send the sample notification and wait for its push delivery."""

    args = parse_args()
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    initialize_database()

    scope = "USER" if args.user_id else "TEAM" if args.team_id else "SUPER"
    engine = PushDeliveryEngine(SessionLocal, build_transports(settings), settings)
    runner = BackgroundTaskRunner(name="sample-dispatch")
    dispatcher = NotificationDispatcher(SessionLocal, engine, settings, runner=runner)
    request = NotificationRequest(
        type=args.type,
        scope=scope,
        title=args.title,
        category=args.category,
        user_id=args.user_id,
        team_id=args.team_id,
        super_role=args.super_role,
    )

    try:
        notification = dispatcher.send_notification(request, skip_push=True)
    except NotificationValidationError as exc:
        raise SystemExit(f"Invalid notification: {exc}") from exc
    except NotificationPersistenceError as exc:
        raise SystemExit(f"Could not store notification: {exc}") from exc

    print(f"Notification created: {notification.id} ({notification.scope})")

    async def _push() -> None:
        if not args.skip_push:
            outcome = await dispatcher.send_push_for_notification(notification.id)
            print(f"Push: {outcome['message']}")
        if args.test_push and args.user_id:
            result = await dispatcher.send_test_push(args.user_id)
            print(f"Test push: Sent: {result.sent}, Failed: {result.failed}")
        await dispatcher.aclose()

    try:
        anyio.run(_push)
    finally:
        runner.shutdown()


if __name__ == "__main__":
    main()
