"""Push transports and the helper that builds them from settings."""

import logging

from notification_hub.config import Settings

from .apns import ApnsTransport
from .base import PushTransport, PushTransports
from .web_push import WebPushTransport

logger = logging.getLogger(__name__)


def build_transports(settings: Settings) -> PushTransports:
    """Return the production transports configured by ``settings``."""

    if not settings.web_push_enabled:
        logger.warning("VAPID keys are not configured; Web Push deliveries will fail")
    if not settings.apns_enabled:
        logger.info("APNs credentials are not configured; APNs deliveries will fail")
    return PushTransports(
        web_push=WebPushTransport(settings), apns=ApnsTransport(settings)
    )


__all__ = [
    "ApnsTransport",
    "PushTransport",
    "PushTransports",
    "WebPushTransport",
    "build_transports",
]
