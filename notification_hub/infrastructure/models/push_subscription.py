"""SQLAlchemy model for push delivery endpoints."""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.sql import expression

from notification_hub.infrastructure.database import Base


class PushSubscriptionModel(Base):
    """Database representation of a device or browser push endpoint."""

    __tablename__ = "push_subscription"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    endpoint = Column(String(1000), nullable=False, unique=True)
    p256dh = Column(String(255), nullable=False, default="")
    auth = Column(String(255), nullable=False, default="")
    apns_token = Column(String(255), nullable=True, index=True)
    apns_bundle_id = Column(String(255), nullable=True)
    apns_environment = Column(String(20), nullable=True)
    device_type = Column(String(20), nullable=False, default="web")
    is_active = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(), nullable=False)
    updated_at = Column(DateTime(), nullable=False)
    last_used_at = Column(DateTime(), nullable=True)


__all__ = ["PushSubscriptionModel"]
