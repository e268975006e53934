"""Transport interface shared by every push provider."""

from __future__ import annotations

from abc import ABC, abstractmethod

from notification_hub.domain.entities import DeviceType, PushPayload, PushSubscription


class PushTransport(ABC):
    """Deliver a single push message to one subscription.

    Implementations raise :class:`~notification_hub.domain.errors.PushDeliveryError`
    on failure, carrying the provider status code when one is available.
    """

    name: str = "push"

    @abstractmethod
    async def send(self, subscription: PushSubscription, payload: PushPayload) -> None:
        """Send ``payload`` to ``subscription``."""

    async def aclose(self) -> None:
        """Release network resources held by the transport."""


class PushTransports:
    """Select the transport for a subscription from its device type."""

    def __init__(self, *, web_push: PushTransport, apns: PushTransport) -> None:
        self.web_push = web_push
        self.apns = apns

    def for_subscription(self, subscription: PushSubscription) -> PushTransport:
        try:
            device_type = DeviceType(subscription.device_type)
        except ValueError:
            return self.web_push
        return self.apns if device_type.uses_apns else self.web_push

    async def aclose(self) -> None:
        await self.web_push.aclose()
        await self.apns.aclose()


__all__ = ["PushTransport", "PushTransports"]
