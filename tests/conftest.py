"""Shared fixtures for the notification hub test-suite."""

from __future__ import annotations

import os
import threading
from concurrent.futures import Future
from datetime import datetime, timedelta, timezone
from typing import Any

import anyio
import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from notification_hub.application.use_cases.notifications import (
    NotificationDispatcher,
    PushDeliveryEngine,
)
from notification_hub.config import Settings
from notification_hub.domain.entities import PushSubscription, User
from notification_hub.infrastructure.database import initialize_database
from notification_hub.infrastructure.notifications import notification_change_feed
from notification_hub.infrastructure.push import PushTransport, PushTransports
from notification_hub.infrastructure.repositories import (
    PushSubscriptionRepository,
    TeamMembershipRepository,
    UserRepository,
)

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingTransport(PushTransport):
    """Transport double that records sends and raises configured errors."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.sent: list[tuple[PushSubscription, Any]] = []
        self.failures: dict[str, Exception] = {}
        self.closed = False

    async def send(self, subscription, payload) -> None:
        error = self.failures.get(subscription.endpoint)
        if error is not None:
            raise error
        self.sent.append((subscription, payload))

    async def aclose(self) -> None:
        self.closed = True

    @property
    def endpoints(self) -> list[str]:
        return [subscription.endpoint for subscription, _ in self.sent]


class InlineRunner:
    """Runs each spawned coroutine to completion before returning."""

    def __init__(self) -> None:
        self.futures: list[Future] = []

    def spawn(self, func, *args) -> Future:
        future: Future = Future()

        def run() -> None:
            try:
                future.set_result(anyio.run(func, *args))
            except BaseException as exc:  # pragma: no cover - surfaced to the test
                future.set_exception(exc)

        thread = threading.Thread(target=run)
        thread.start()
        thread.join()
        self.futures.append(future)
        return future

    def shutdown(self, timeout: float = 5.0) -> None:
        return None


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def clear_change_feed():
    notification_change_feed.clear()
    yield
    notification_change_feed.clear()


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(BASE_TIME)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        vapid_public_key="public-key",
        vapid_private_key="private-key",
    )


@pytest.fixture
def web_push() -> RecordingTransport:
    return RecordingTransport("web_push")


@pytest.fixture
def apns() -> RecordingTransport:
    return RecordingTransport("apns")


@pytest.fixture
def delivery_engine(session_factory, web_push, apns, settings, clock) -> PushDeliveryEngine:
    return PushDeliveryEngine(
        session_factory,
        PushTransports(web_push=web_push, apns=apns),
        settings,
        clock=clock,
    )


@pytest.fixture
def runner() -> InlineRunner:
    return InlineRunner()


@pytest.fixture
def dispatcher(session_factory, delivery_engine, settings, runner, clock) -> NotificationDispatcher:
    return NotificationDispatcher(
        session_factory, delivery_engine, settings, runner=runner, clock=clock
    )


@pytest.fixture
def add_user(session_factory):
    def _add(user_id: str, *, super_role: str | None = None) -> User:
        with session_factory() as db:
            return UserRepository(db).create(
                User(id=user_id, email=f"{user_id}@example.com", name=user_id, super_role=super_role)
            )

    return _add


@pytest.fixture
def add_team_member(session_factory, add_user):
    def _add(team_id: str, user_id: str) -> None:
        with session_factory() as db:
            if UserRepository(db).get(user_id) is None:
                add_user(user_id)
            TeamMembershipRepository(db).add_member(team_id, user_id)

    return _add


@pytest.fixture
def add_subscription(session_factory, clock):
    def _add(
        user_id: str,
        endpoint: str,
        *,
        device_type: str = "web",
        is_active: bool = True,
        apns_token: str | None = None,
    ) -> PushSubscription:
        now = clock()
        with session_factory() as db:
            return PushSubscriptionRepository(db).create(
                PushSubscription(
                    id=None,
                    user_id=user_id,
                    endpoint=endpoint,
                    p256dh="" if apns_token else "p256dh-key",
                    auth="" if apns_token else "auth-secret",
                    device_type=device_type,
                    is_active=is_active,
                    apns_token=apns_token,
                    apns_bundle_id="app.bundle" if apns_token else None,
                    apns_environment="production" if apns_token else None,
                    created_at=now,
                    updated_at=now,
                    last_used_at=now,
                )
            )

    return _add


@pytest.fixture
def load_subscription(session_factory):
    def _load(endpoint: str) -> PushSubscription | None:
        with session_factory() as db:
            return PushSubscriptionRepository(db).get_by_endpoint(endpoint)

    return _load
