"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationBase(BaseModel):
    """Fields describing a notification addressed to one scope target."""

    type: str = Field(..., min_length=1)
    scope: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    user_id: str | None = None
    team_id: str | None = None
    super_role: str | None = None
    avatar_url: str | None = None
    metadata: dict[str, Any] | None = None
    expires_in_days: int | None = None

    model_config = ConfigDict(extra="forbid")


class NotificationCreate(NotificationBase):
    skip_push: bool = False


class NotificationBatchCreate(BaseModel):
    notifications: list[NotificationBase] = Field(..., min_length=1)
    skip_push: bool = False


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    type: str
    scope: str
    title: str
    category: str
    user_id: str | None = None
    team_id: str | None = None
    super_role: str | None = None
    avatar_url: str | None = None
    metadata: dict[str, Any] | None = None
    is_unread: bool
    is_archived: bool
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UnreadCountRead(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int


class PushTriggerResponse(BaseModel):
    success: bool
    message: str
    sent: int | None = None
    failed: int | None = None


__all__ = [
    "MarkAllReadResponse",
    "NotificationBase",
    "NotificationBatchCreate",
    "NotificationCreate",
    "NotificationRead",
    "PushTriggerResponse",
    "UnreadCountRead",
]
