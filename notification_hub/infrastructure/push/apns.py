"""Apple Push Notification service transport for iOS and macOS devices."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

import anyio
import httpx
from jose import jwt

from notification_hub.config import Settings
from notification_hub.domain.entities import PushPayload, PushSubscription
from notification_hub.domain.errors import PushDeliveryError

from .base import PushTransport

logger = logging.getLogger(__name__)

APNS_PRODUCTION_HOST = "https://api.push.apple.com"
APNS_SANDBOX_HOST = "https://api.sandbox.push.apple.com"
# Apple rejects provider tokens older than one hour.
_TOKEN_LIFETIME_SECONDS = 50 * 60


class ApnsTransport(PushTransport):
    """Send alert notifications over the APNs HTTP/2 API using token auth."""

    name = "apns"

    def __init__(
        self,
        settings: Settings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._key_id = settings.apns_key_id
        self._team_id = settings.apns_team_id
        self._key_path = settings.apns_key_path
        self._default_topic = settings.apns_bundle_id
        self._client = client
        self._owns_client = client is None
        self._token: str | None = None
        self._token_issued_at = 0.0

    @property
    def configured(self) -> bool:
        return bool(self._key_id and self._team_id and self._key_path)

    async def send(self, subscription: PushSubscription, payload: PushPayload) -> None:
        if not subscription.apns_token:
            raise PushDeliveryError("APNs token not found")
        if not self.configured:
            raise PushDeliveryError("APNs is not configured (missing signing key)")

        host = (
            APNS_SANDBOX_HOST
            if subscription.apns_environment == "sandbox"
            else APNS_PRODUCTION_HOST
        )
        headers = {
            "authorization": f"bearer {await self._provider_token()}",
            "apns-topic": subscription.apns_bundle_id or self._default_topic,
            "apns-push-type": "alert",
            "apns-priority": "10",
        }
        if payload.tag:
            headers["apns-collapse-id"] = payload.tag[:64]

        client = await self._get_client()
        try:
            response = await client.post(
                f"{host}/3/device/{subscription.apns_token}",
                json=build_apns_body(payload),
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise PushDeliveryError(f"APNs request failed: {exc}") from exc

        if response.status_code == 200:
            return
        reason = _extract_reason(response)
        raise PushDeliveryError(
            f"APNs responded with status {response.status_code}: {reason}",
            status_code=response.status_code,
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(http2=True, timeout=30.0)
        return self._client

    async def _provider_token(self) -> str:
        now = time.time()
        if self._token and now - self._token_issued_at < _TOKEN_LIFETIME_SECONDS:
            return self._token
        signing_key = await anyio.to_thread.run_sync(
            Path(self._key_path).read_text
        )
        self._token = jwt.encode(
            {"iss": self._team_id, "iat": int(now)},
            signing_key,
            algorithm="ES256",
            headers={"kid": self._key_id},
        )
        self._token_issued_at = now
        logger.debug("Issued new APNs provider token for key %s", self._key_id)
        return self._token


def build_apns_body(payload: PushPayload) -> dict[str, Any]:
    """Translate a transport-agnostic payload into an APNs JSON body."""

    body: dict[str, Any] = {
        "aps": {
            "alert": {"title": payload.title, "body": payload.body},
            "badge": 1,
            "sound": "default",
            "thread-id": payload.data.get("category") or "notifications",
        }
    }
    body.update(payload.data)
    return body


def _extract_reason(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or "unknown"
    if isinstance(data, dict) and data.get("reason"):
        return str(data["reason"])
    return "unknown"


__all__ = ["APNS_PRODUCTION_HOST", "APNS_SANDBOX_HOST", "ApnsTransport", "build_apns_body"]
