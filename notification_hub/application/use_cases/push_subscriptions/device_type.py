"""Device family detection for push subscriptions."""

from __future__ import annotations

from notification_hub.domain.entities import DeviceType


def detect_device_type(user_agent: str | None) -> str:
    """Infer the device family from a browser or client user agent."""

    agent = (user_agent or "").lower()
    if "iphone" in agent or "ipad" in agent:
        return DeviceType.IOS.value
    if "mac os x" in agent:
        return DeviceType.MACOS.value
    if "android" in agent:
        return DeviceType.ANDROID.value
    return DeviceType.WEB.value


def resolve_device_type(device_type: str | None, user_agent: str | None) -> str:
    if not device_type:
        return detect_device_type(user_agent)
    normalized = device_type.strip().lower()
    allowed = {member.value for member in DeviceType}
    if normalized not in allowed:
        raise ValueError(
            f"Invalid device type '{device_type}'. Expected one of: {', '.join(sorted(allowed))}"
        )
    return normalized
