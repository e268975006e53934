"""Schemas for retention and maintenance endpoints."""

from pydantic import BaseModel, ConfigDict


class CleanupReportRead(BaseModel):
    expired: int
    archived: int
    read: int
    total: int

    model_config = ConfigDict(from_attributes=True)


class NotificationStatsRead(BaseModel):
    total: int
    unread: int
    archived: int
    expired: int

    model_config = ConfigDict(from_attributes=True)


class SubscriptionCleanupRead(BaseModel):
    deleted: int
