"""Tests for push subscription registration and lifecycle."""

from __future__ import annotations

import pytest

from notification_hub.application.use_cases.push_subscriptions import (
    cleanup_old_subscriptions,
    detect_device_type,
    list_user_subscriptions,
    subscribe_to_apns,
    subscribe_to_push,
    unsubscribe_from_push,
)
from notification_hub.infrastructure.repositories import PushSubscriptionRepository

ENDPOINT = "https://fcm.googleapis.com/fcm/send/abc"
IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15"
MAC_UA = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15"
ANDROID_UA = "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36"


@pytest.mark.parametrize(
    "user_agent, expected",
    [
        (IPHONE_UA, "ios"),
        ("Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X)", "ios"),
        (MAC_UA, "macos"),
        (ANDROID_UA, "android"),
        ("Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) Android-Emulator/33", "macos"),
        ("Mozilla/5.0 (Windows NT 10.0; Win64; x64)", "web"),
        (None, "web"),
    ],
)
def test_detect_device_type(user_agent, expected) -> None:
    assert detect_device_type(user_agent) == expected


def test_subscribe_creates_active_subscription(session, clock) -> None:
    subscription = subscribe_to_push(
        session,
        "user-1",
        endpoint=ENDPOINT,
        p256dh="key",
        auth="secret",
        user_agent=ANDROID_UA,
        now=clock(),
    )

    assert subscription.is_active is True
    assert subscription.device_type == "android"
    assert subscription.created_at == clock()
    assert subscription.last_used_at == clock()


def test_subscribe_twice_keeps_a_single_row(session_factory, clock) -> None:
    with session_factory() as db:
        first = subscribe_to_push(
            db, "user-1", endpoint=ENDPOINT, p256dh="k1", auth="a1", now=clock()
        )
    clock.advance(hours=1)
    with session_factory() as db:
        second = subscribe_to_push(
            db, "user-2", endpoint=ENDPOINT, p256dh="k2", auth="a2", now=clock()
        )
        rows = PushSubscriptionRepository(db).list_for_user("user-2")

    assert second.id == first.id
    assert second.user_id == "user-2"
    assert (second.p256dh, second.auth) == ("k2", "a2")
    assert second.created_at == first.created_at
    assert second.updated_at == clock()
    assert len(rows) == 1


def test_subscribe_reactivates_unsubscribed_endpoint(session_factory, clock) -> None:
    with session_factory() as db:
        subscribe_to_push(db, "user-1", endpoint=ENDPOINT, p256dh="k", auth="a", now=clock())
        assert unsubscribe_from_push(db, ENDPOINT, now=clock()) is True
    with session_factory() as db:
        assert list_user_subscriptions(db, "user-1") == []
        refreshed = subscribe_to_push(
            db, "user-1", endpoint=ENDPOINT, p256dh="k", auth="a", now=clock()
        )

    assert refreshed.is_active is True


def test_explicit_device_type_is_validated(session) -> None:
    with pytest.raises(ValueError, match="Invalid device type"):
        subscribe_to_push(
            session, "user-1", endpoint=ENDPOINT, p256dh="k", auth="a", device_type="fridge"
        )


def test_unsubscribe_unknown_endpoint_returns_false(session) -> None:
    assert unsubscribe_from_push(session, "https://push.example.com/unknown") is False


def test_apns_subscription_defaults(session, settings) -> None:
    subscription = subscribe_to_apns(session, "user-1", "abc123", settings=settings)

    assert subscription.endpoint == "apns://abc123"
    assert (subscription.p256dh, subscription.auth) == ("", "")
    assert subscription.apns_bundle_id == settings.apns_bundle_id
    assert subscription.apns_environment == "production"
    assert subscription.device_type == "ios"


def test_apns_subscription_rejects_web_device(session, settings) -> None:
    with pytest.raises(ValueError, match="ios or macos"):
        subscribe_to_apns(session, "user-1", "abc123", device_type="web", settings=settings)


def test_apns_subscription_upserts_by_token(session_factory, settings) -> None:
    with session_factory() as db:
        first = subscribe_to_apns(db, "user-1", "tok", settings=settings)
    with session_factory() as db:
        second = subscribe_to_apns(
            db, "user-1", "tok", environment="sandbox", device_type="macos", settings=settings
        )

    assert second.id == first.id
    assert second.apns_environment == "sandbox"
    assert second.device_type == "macos"


def test_list_user_subscriptions_can_include_inactive(
    session, add_subscription
) -> None:
    add_subscription("user-1", "https://push.example.com/a")
    add_subscription("user-1", "https://push.example.com/b", is_active=False)

    active = list_user_subscriptions(session, "user-1")
    everything = list_user_subscriptions(session, "user-1", active_only=False)

    assert [s.endpoint for s in active] == ["https://push.example.com/a"]
    assert len(everything) == 2


def test_cleanup_old_subscriptions(session_factory, add_subscription, clock) -> None:
    add_subscription("user-1", "https://push.example.com/stale-inactive", is_active=False)
    add_subscription("user-1", "https://push.example.com/unused")
    clock.advance(days=100)
    add_subscription("user-1", "https://push.example.com/fresh")

    with session_factory() as db:
        deleted = cleanup_old_subscriptions(db, 90, now=clock())
        remaining = PushSubscriptionRepository(db).list_for_user("user-1")

    assert deleted == 2
    assert [s.endpoint for s in remaining] == ["https://push.example.com/fresh"]


def test_cleanup_keeps_recently_deactivated(session_factory, add_subscription, clock) -> None:
    add_subscription("user-1", "https://push.example.com/a")
    clock.advance(days=10)
    with session_factory() as db:
        unsubscribe_from_push(db, "https://push.example.com/a", now=clock())
        clock.advance(days=5)
        deleted = cleanup_old_subscriptions(db, 90, now=clock())

    assert deleted == 0
