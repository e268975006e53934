"""Web Push transport for browsers and Android devices."""

from __future__ import annotations

import functools
import json
import logging

import anyio
from pywebpush import WebPushException, webpush

from notification_hub.config import Settings
from notification_hub.domain.entities import PushPayload, PushSubscription
from notification_hub.domain.errors import PushDeliveryError

from .base import PushTransport

logger = logging.getLogger(__name__)


class WebPushTransport(PushTransport):
    """Send VAPID-signed Web Push messages through ``pywebpush``."""

    name = "web_push"

    def __init__(self, settings: Settings) -> None:
        self._private_key = settings.vapid_private_key
        self._subject = settings.vapid_subject
        self._ttl = settings.push_ttl_seconds

    @property
    def configured(self) -> bool:
        return bool(self._private_key)

    async def send(self, subscription: PushSubscription, payload: PushPayload) -> None:
        if not self.configured:
            raise PushDeliveryError("Web Push is not configured (missing VAPID keys)")
        if not (subscription.p256dh and subscription.auth):
            raise PushDeliveryError("Web Push subscription is missing encryption keys")

        subscription_info = {
            "endpoint": subscription.endpoint,
            "keys": {"p256dh": subscription.p256dh, "auth": subscription.auth},
        }
        request = functools.partial(
            webpush,
            subscription_info=subscription_info,
            data=json.dumps(payload.to_dict()),
            vapid_private_key=self._private_key,
            # pywebpush adds "aud" and "exp" to the claims it receives.
            vapid_claims={"sub": self._subject},
            ttl=self._ttl,
        )
        try:
            await anyio.to_thread.run_sync(request)
        except WebPushException as exc:
            response = getattr(exc, "response", None)
            status_code = getattr(response, "status_code", None)
            raise PushDeliveryError(
                f"Web Push rejected by {_endpoint_host(subscription.endpoint)}: {exc.message}",
                status_code=status_code,
            ) from exc


def _endpoint_host(endpoint: str) -> str:
    host = endpoint.split("://", 1)[-1]
    return host.split("/", 1)[0] or endpoint


__all__ = ["WebPushTransport"]
