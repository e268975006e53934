"""Tests for notification creation and push hand-off."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import text

from notification_hub.application.use_cases.notifications import (
    NotificationDispatcher,
    get_notification,
)
from notification_hub.domain.entities import DeliveryResult, NotificationRequest
from notification_hub.domain.errors import (
    NotificationPersistenceError,
    NotificationValidationError,
)


def _request(**overrides) -> NotificationRequest:
    fields = {
        "type": "SYSTEM",
        "scope": "USER",
        "title": "Your export is ready",
        "category": "Exports",
        "user_id": "user-1",
    }
    fields.update(overrides)
    return NotificationRequest(**fields)


def test_send_notification_persists_with_defaults(dispatcher, session, clock) -> None:
    notification = dispatcher.send_notification(_request(type="mail"), skip_push=True)

    assert notification.id
    assert notification.type == "MAIL"
    assert notification.scope == "USER"
    assert notification.is_unread is True
    assert notification.is_archived is False
    assert notification.created_at == clock()
    assert notification.expires_at == clock() + timedelta(days=30)
    assert get_notification(session, notification.id) == notification


def test_send_notification_uses_explicit_expiry(dispatcher, clock) -> None:
    notification = dispatcher.send_notification(
        _request(expires_in_days=7), skip_push=True
    )

    assert notification.expires_at - notification.created_at == timedelta(days=7)


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"user_id": None}, "user_id is required"),
        ({"team_id": "team-1"}, "team_id must not be set"),
        ({"scope": "TEAM"}, "team_id is required"),
        ({"scope": "GLOBAL"}, "Invalid scope"),
        ({"type": "UNKNOWN"}, "Invalid notification type"),
        ({"expires_in_days": 0}, "greater than zero"),
        ({"scope": "SUPER", "user_id": None, "super_role": "OWNER"}, "ADMIN or SUPPORT"),
    ],
)
def test_invalid_requests_are_rejected_before_any_write(
    dispatcher, session, runner, overrides, message
) -> None:
    with pytest.raises(NotificationValidationError, match=message):
        dispatcher.send_notification(_request(**overrides))

    count = session.execute(text("SELECT COUNT(*) FROM notification")).scalar()
    assert count == 0
    assert runner.futures == []


def test_scope_is_case_insensitive(dispatcher) -> None:
    notification = dispatcher.send_notification(
        _request(scope="super", user_id=None, super_role="admin"), skip_push=True
    )

    assert notification.scope == "SUPER"
    assert notification.super_role == "ADMIN"


def test_send_notification_fans_out_in_background(
    dispatcher, runner, add_subscription, web_push
) -> None:
    add_subscription("user-1", "https://push.example.com/a")

    notification = dispatcher.send_notification(_request())

    assert len(runner.futures) == 1
    result = runner.futures[0].result()
    assert isinstance(result, DeliveryResult)
    assert result.sent == 1
    assert web_push.sent[0][1].tag == notification.id


def test_skip_push_does_not_schedule_fan_out(dispatcher, runner) -> None:
    dispatcher.send_notification(_request(), skip_push=True)

    assert runner.futures == []


def test_fan_out_failure_never_reaches_caller(
    session_factory, settings, runner, clock
) -> None:
    class ExplodingEngine:
        async def deliver(self, notification):
            raise RuntimeError("transport pool exhausted")

    dispatcher = NotificationDispatcher(
        session_factory, ExplodingEngine(), settings, runner=runner, clock=clock
    )

    notification = dispatcher.send_notification(_request())

    assert notification.id
    assert runner.futures[0].result() is None


def test_persistence_failure_is_wrapped(dispatcher, session) -> None:
    session.execute(text("DROP TABLE notification"))
    session.commit()

    with pytest.raises(NotificationPersistenceError, match="Failed to send notification"):
        dispatcher.send_notification(_request())


def test_batch_returns_only_successes(dispatcher) -> None:
    created = dispatcher.send_notification_batch(
        [
            _request(title="first"),
            _request(user_id=None),
            _request(title="third"),
        ],
        skip_push=True,
    )

    assert [notification.title for notification in created] == ["first", "third"]


def test_scoped_helpers_build_requests(dispatcher) -> None:
    user = dispatcher.send_user_notification(
        "user-9", type="CHAT", title="Hi", category="Chat", skip_push=True
    )
    team = dispatcher.send_team_notification(
        "team-3", type="PROJECT", title="Sprint", category="Projects", skip_push=True
    )
    admins = dispatcher.send_super_notification(
        "ADMIN", type="SYSTEM", title="Disk", category="Ops", skip_push=True
    )

    assert (user.scope, user.user_id) == ("USER", "user-9")
    assert (team.scope, team.team_id) == ("TEAM", "team-3")
    assert (admins.scope, admins.super_role) == ("SUPER", "ADMIN")


@pytest.mark.anyio
async def test_send_push_for_unknown_notification(dispatcher) -> None:
    outcome = await dispatcher.send_push_for_notification("missing")

    assert outcome == {"success": False, "message": "Notification not found"}


@pytest.mark.anyio
async def test_send_push_for_existing_notification(
    dispatcher, add_subscription, web_push
) -> None:
    add_subscription("user-1", "https://push.example.com/a")
    notification = dispatcher.send_notification(_request(), skip_push=True)

    outcome = await dispatcher.send_push_for_notification(notification.id)

    assert outcome["success"] is True
    assert outcome["sent"] == 1
    assert web_push.endpoints == ["https://push.example.com/a"]


def test_vapid_public_key_is_exposed(dispatcher) -> None:
    assert dispatcher.get_vapid_public_key() == "public-key"
