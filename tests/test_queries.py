"""Tests for listing and mutating stored notifications."""

from __future__ import annotations

from datetime import timedelta

import pytest

from notification_hub.application.use_cases.notifications import (
    archive_notification,
    delete_notification,
    get_notification,
    get_unread_count,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
    unarchive_notification,
)
from notification_hub.domain.entities import NotificationFilters, NotificationRequest
from notification_hub.domain.errors import (
    NotificationNotFoundError,
    NotificationValidationError,
)


@pytest.fixture
def notify(dispatcher):
    def _notify(scope: str = "USER", target: str = "user-1", **fields):
        target_field = {"USER": "user_id", "TEAM": "team_id", "SUPER": "super_role"}[scope]
        request = NotificationRequest(
            type=fields.pop("type", "SYSTEM"),
            scope=scope,
            title=fields.pop("title", "Hello"),
            category=fields.pop("category", "General"),
            **{target_field: target},
            **fields,
        )
        return dispatcher.send_notification(request, skip_push=True)

    return _notify


def test_targets_are_isolated(session, notify) -> None:
    notify("USER", "user-1", title="for user 1")
    notify("USER", "user-2", title="for user 2")
    notify("TEAM", "team-1", title="for team")
    notify("SUPER", "ADMIN", title="for admins")

    assert [n.title for n in list_notifications(session, "USER", "user-1")] == ["for user 1"]
    assert [n.title for n in list_notifications(session, "team", "team-1")] == ["for team"]
    assert [n.title for n in list_notifications(session, "SUPER", "admin")] == ["for admins"]
    assert list_notifications(session, "SUPER", "SUPPORT") == []


def test_list_is_newest_first_with_pagination(session, notify, clock) -> None:
    for index in range(5):
        notify(title=f"n{index}")
        clock.advance(minutes=1)

    page = list_notifications(session, "USER", "user-1", NotificationFilters(limit=2, offset=1))

    assert [n.title for n in page] == ["n3", "n2"]


def test_list_filters(session, notify, clock) -> None:
    first = notify(type="CHAT", title="chat")
    clock.advance(days=1)
    notify(type="MAIL", title="mail")
    mark_as_read(session, first.id)

    unread = list_notifications(session, "USER", "user-1", NotificationFilters(unread_only=True))
    chats = list_notifications(session, "USER", "user-1", NotificationFilters(type="chat"))
    recent = list_notifications(
        session,
        "USER",
        "user-1",
        NotificationFilters(start_date=first.created_at + timedelta(hours=1)),
    )

    assert [n.title for n in unread] == ["mail"]
    assert [n.title for n in chats] == ["chat"]
    assert [n.title for n in recent] == ["mail"]


def test_list_rejects_oversized_limit(session) -> None:
    with pytest.raises(NotificationValidationError, match="limit"):
        list_notifications(session, "USER", "user-1", NotificationFilters(limit=500))


def test_mark_as_read_is_repeatable(session, notify) -> None:
    notification = notify()

    first = mark_as_read(session, notification.id)
    second = mark_as_read(session, notification.id)

    assert first.is_unread is False
    assert second.is_unread is False


def test_mark_all_as_read_counts_changes(session, notify) -> None:
    notify()
    notify()
    already_read = notify()
    mark_as_read(session, already_read.id)
    notify(target="user-2")

    assert mark_all_as_read(session, user_id="user-1") == 2
    assert mark_all_as_read(session, user_id="user-1") == 0
    assert get_unread_count(session, "USER", "user-1") == 0
    assert get_unread_count(session, "USER", "user-2") == 1


def test_mark_all_as_read_requires_exactly_one_target(session) -> None:
    with pytest.raises(NotificationValidationError, match="Exactly one"):
        mark_all_as_read(session)
    with pytest.raises(NotificationValidationError, match="Exactly one"):
        mark_all_as_read(session, user_id="user-1", team_id="team-1")


def test_archive_roundtrip_keeps_read_state(session, notify) -> None:
    notification = notify()

    archived = archive_notification(session, notification.id)
    restored = unarchive_notification(session, notification.id)

    assert archived.is_archived is True
    assert restored.is_archived is False
    assert restored.is_unread is True


def test_delete_removes_notification(session, notify) -> None:
    notification = notify()

    delete_notification(session, notification.id)

    assert get_notification(session, notification.id) is None


@pytest.mark.parametrize(
    "operation", [mark_as_read, archive_notification, unarchive_notification, delete_notification]
)
def test_unknown_ids_raise_not_found(session, operation) -> None:
    with pytest.raises(NotificationNotFoundError, match="missing-id"):
        operation(session, "missing-id")


def test_get_unknown_notification_returns_none(session) -> None:
    assert get_notification(session, "missing-id") is None
