"""FastAPI dependency utilities."""

from functools import lru_cache

from notification_hub.application.use_cases.notifications import (
    NotificationDispatcher,
    PushDeliveryEngine,
)
from notification_hub.config import Settings, get_settings
from notification_hub.infrastructure.background import background_runner
from notification_hub.infrastructure.database import SessionLocal
from notification_hub.infrastructure.notifications import (
    RealtimeClient,
    get_realtime_client,
)
from notification_hub.infrastructure.push import build_transports


def get_app_settings() -> Settings:
    """Return the cached application settings."""

    return get_settings()


@lru_cache
def get_dispatcher() -> NotificationDispatcher:
    """Return the process wide dispatcher wired to the production transports."""

    settings = get_settings()
    engine = PushDeliveryEngine(SessionLocal, build_transports(settings), settings)
    return NotificationDispatcher(SessionLocal, engine, settings, runner=background_runner)


def get_realtime() -> RealtimeClient:
    return get_realtime_client(get_settings())


__all__ = ["get_app_settings", "get_dispatcher", "get_realtime"]
