"""Push subscription schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PushSubscriptionKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushSubscriptionCreate(BaseModel):
    """Browser ``PushSubscription`` JSON plus the owning user."""

    user_id: str = Field(..., min_length=1)
    endpoint: str = Field(..., min_length=1)
    keys: PushSubscriptionKeys
    user_agent: str | None = None
    device_type: str | None = None


class ApnsSubscriptionCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    apns_token: str = Field(..., min_length=1)
    bundle_id: str | None = None
    environment: str | None = None
    user_agent: str | None = None
    device_type: str | None = None


class PushUnsubscribeRequest(BaseModel):
    endpoint: str = Field(..., min_length=1)


class PushUnsubscribeResponse(BaseModel):
    success: bool


class PushSubscriptionRead(BaseModel):
    id: str
    user_id: str
    endpoint: str
    device_type: str
    is_active: bool
    apns_bundle_id: str | None = None
    apns_environment: str | None = None
    user_agent: str | None = None
    created_at: datetime
    updated_at: datetime
    last_used_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class VapidPublicKeyRead(BaseModel):
    public_key: str | None


class PushTestResponse(BaseModel):
    success: bool
    message: str
    sent: int
    failed: int
