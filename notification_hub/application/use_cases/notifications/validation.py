"""Normalization and validation of notification requests."""

from __future__ import annotations

from dataclasses import replace

from notification_hub.domain.entities import (
    NotificationRequest,
    NotificationScope,
    NotificationType,
    SuperRole,
)
from notification_hub.domain.errors import NotificationValidationError

_TARGET_FIELDS = {
    NotificationScope.USER.value: "user_id",
    NotificationScope.TEAM.value: "team_id",
    NotificationScope.SUPER.value: "super_role",
}


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def normalize_scope(scope: str | None) -> str:
    """Return the upper-case scope or raise when it is not a known one."""

    normalized = (_clean(scope) or "").upper()
    if normalized not in _TARGET_FIELDS:
        raise NotificationValidationError(
            f"Invalid scope '{scope}'. Expected one of: USER, TEAM, SUPER"
        )
    return normalized


def normalize_type(notification_type: str | None) -> str:
    normalized = (_clean(notification_type) or "").upper()
    if normalized not in NotificationType.__members__:
        raise NotificationValidationError(
            f"Invalid notification type '{notification_type}'"
        )
    return normalized


def normalize_super_role(super_role: str | None) -> str:
    normalized = (_clean(super_role) or "").upper()
    if normalized not in SuperRole.__members__:
        raise NotificationValidationError("super_role must be either ADMIN or SUPPORT")
    return normalized


def validate_notification_request(request: NotificationRequest) -> NotificationRequest:
    """Check the request against its scope and return a normalized copy.

    The scope determines which single target field must be present; the
    other two target fields must be empty.
    """

    scope = normalize_scope(request.scope)
    notification_type = normalize_type(request.type)

    targets = {
        "user_id": _clean(request.user_id),
        "team_id": _clean(request.team_id),
        "super_role": _clean(request.super_role),
    }
    required = _TARGET_FIELDS[scope]
    if targets[required] is None:
        raise NotificationValidationError(
            f"{required} is required for {scope.lower()}-scoped notifications"
        )
    for field_name, value in targets.items():
        if field_name != required and value is not None:
            raise NotificationValidationError(
                f"{field_name} must not be set for {scope.lower()}-scoped notifications"
            )
    if scope == NotificationScope.SUPER.value:
        targets["super_role"] = normalize_super_role(targets["super_role"])

    title = _clean(request.title)
    if title is None:
        raise NotificationValidationError("title is required")
    category = _clean(request.category)
    if category is None:
        raise NotificationValidationError("category is required")

    expires_in_days = request.expires_in_days
    if expires_in_days is not None:
        if isinstance(expires_in_days, bool) or not isinstance(expires_in_days, int):
            raise NotificationValidationError("expires_in_days must be an integer")
        if expires_in_days <= 0:
            raise NotificationValidationError("expires_in_days must be greater than zero")

    if request.metadata is not None and not isinstance(request.metadata, dict):
        raise NotificationValidationError("metadata must be a JSON object")

    return replace(
        request,
        type=notification_type,
        scope=scope,
        title=title,
        category=category,
        avatar_url=_clean(request.avatar_url),
        **targets,
    )


__all__ = [
    "normalize_scope",
    "normalize_super_role",
    "normalize_type",
    "validate_notification_request",
]
