"""Integration tests for the HTTP and websocket surface."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from notification_hub.infrastructure.database import get_db
from notification_hub.infrastructure.notifications import (
    ChangeFeedRealtimeClient,
    notification_change_feed,
)
from notification_hub.interfaces.api.dependencies import (
    get_app_settings,
    get_dispatcher,
    get_realtime,
)


@pytest.fixture()
def client(session_factory, dispatcher, settings):
    """Return a test client bound to the in-memory database and fake transports."""

    from main import create_app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_realtime] = lambda: ChangeFeedRealtimeClient(
        notification_change_feed
    )
    with TestClient(app) as test_client:
        yield test_client


def _payload(**overrides) -> dict:
    payload = {
        "type": "order",
        "scope": "user",
        "title": "Order <i>#7</i> shipped",
        "category": "Orders",
        "user_id": "user-1",
        "skip_push": True,
    }
    payload.update(overrides)
    return payload


def test_notification_lifecycle(client: TestClient) -> None:
    response = client.post("/notifications/", json=_payload())
    assert response.status_code == 201
    created = response.json()
    assert created["type"] == "ORDER"
    assert created["scope"] == "USER"
    assert created["is_unread"] is True
    notification_id = created["id"]

    listing = client.get("/notifications/USER/user-1")
    assert [item["id"] for item in listing.json()] == [notification_id]
    assert client.get("/notifications/USER/user-1/unread-count").json() == {"count": 1}

    read = client.post(f"/notifications/{notification_id}/read")
    assert read.json()["is_unread"] is False
    archived = client.post(f"/notifications/{notification_id}/archive")
    assert archived.json()["is_archived"] is True
    restored = client.post(f"/notifications/{notification_id}/unarchive")
    assert restored.json()["is_archived"] is False

    assert client.get(f"/notifications/{notification_id}").status_code == 200
    assert client.delete(f"/notifications/{notification_id}").status_code == 204
    assert client.get(f"/notifications/{notification_id}").status_code == 404


def test_validation_errors_map_to_422(client: TestClient) -> None:
    response = client.post("/notifications/", json=_payload(user_id=None))

    assert response.status_code == 422
    assert "user_id is required" in response.json()["detail"]


def test_unknown_notification_maps_to_404(client: TestClient) -> None:
    response = client.post("/notifications/missing/read")

    assert response.status_code == 404
    assert response.json()["detail"] == "Notification with id missing not found"


def test_list_limit_is_bounded(client: TestClient) -> None:
    assert client.get("/notifications/USER/user-1", params={"limit": 201}).status_code == 422


def test_batch_returns_successes(client: TestClient) -> None:
    response = client.post(
        "/notifications/batch",
        json={
            "notifications": [
                {k: v for k, v in _payload().items() if k != "skip_push"},
                {k: v for k, v in _payload(scope="TEAM").items() if k != "skip_push"},
            ],
            "skip_push": True,
        },
    )

    assert response.status_code == 201
    assert len(response.json()) == 1


def test_read_all_for_team(client: TestClient) -> None:
    for _ in range(2):
        client.post("/notifications/", json=_payload(scope="TEAM", user_id=None, team_id="team-1"))

    response = client.post("/notifications/team/team-1/read-all")

    assert response.json() == {"updated": 2}


def test_dispatch_triggers_push(client: TestClient, add_subscription, web_push) -> None:
    add_subscription("user-1", "https://push.example.com/a")

    client.post("/notifications/", json=_payload(skip_push=False))

    assert web_push.endpoints == ["https://push.example.com/a"]
    assert web_push.sent[0][1].body == "Order #7 shipped"


def test_manual_push_endpoint(client: TestClient, add_subscription) -> None:
    add_subscription("user-1", "https://push.example.com/a")
    created = client.post("/notifications/", json=_payload()).json()

    response = client.post(f"/notifications/{created['id']}/push")

    assert response.json()["success"] is True
    assert response.json()["sent"] == 1


def test_subscription_endpoints(client: TestClient) -> None:
    body = {
        "user_id": "user-1",
        "endpoint": "https://push.example.com/browser",
        "keys": {"p256dh": "key", "auth": "secret"},
    }
    first = client.post(
        "/push/subscriptions",
        json=body,
        headers={"user-agent": "Mozilla/5.0 (Linux; Android 14)"},
    )
    second = client.post("/push/subscriptions", json=body)
    apns = client.post(
        "/push/subscriptions/apns", json={"user_id": "user-1", "apns_token": "tok"}
    )

    assert first.status_code == 201
    assert first.json()["device_type"] == "android"
    assert second.json()["id"] == first.json()["id"]
    assert apns.json()["endpoint"] == "apns://tok"
    assert len(client.get("/push/subscriptions/user-1").json()) == 2

    unsubscribed = client.post(
        "/push/subscriptions/unsubscribe", json={"endpoint": body["endpoint"]}
    )
    unknown = client.post("/push/subscriptions/unsubscribe", json={"endpoint": "nope"})
    assert unsubscribed.json() == {"success": True}
    assert unknown.json() == {"success": False}


def test_test_push_and_vapid_key(client: TestClient, add_subscription) -> None:
    add_subscription("user-1", "https://push.example.com/a")

    assert client.get("/push/vapid-public-key").json() == {"public_key": "public-key"}
    response = client.post("/push/test/user-1")
    assert response.json()["message"] == "Sent: 1, Failed: 0"


def test_maintenance_endpoints(client: TestClient) -> None:
    client.post("/notifications/", json=_payload())

    stats = client.get("/maintenance/stats").json()
    report = client.post("/maintenance/cleanup").json()
    subscriptions = client.post("/maintenance/subscriptions/cleanup").json()

    assert stats["total"] == 1
    assert report == {"expired": 0, "archived": 0, "read": 0, "total": 0}
    assert subscriptions == {"deleted": 0}


def test_websocket_streams_changes(client: TestClient) -> None:
    existing = client.post("/notifications/", json=_payload(title="before")).json()

    with client.websocket_connect("/notifications/ws/user/user-1") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert [item["id"] for item in init["data"]] == [existing["id"]]

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        created = client.post("/notifications/", json=_payload(title="after")).json()
        event = websocket.receive_json()
        assert event["type"] == "notification_created"
        assert event["data"]["id"] == created["id"]

        websocket.send_json({"type": "ack", "ids": [created["id"]]})
        ack_event = websocket.receive_json()
        assert ack_event["type"] == "notification_updated"
        assert ack_event["data"]["is_unread"] is False


def test_websocket_rejects_unknown_scope(client: TestClient) -> None:
    from starlette.websockets import WebSocketDisconnect

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/notifications/ws/global/x") as websocket:
            websocket.receive_json()
