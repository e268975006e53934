"""SQLAlchemy model for persisted notifications."""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Index, JSON, String, Text
from sqlalchemy.sql import expression

from notification_hub.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid4())


class NotificationModel(Base):
    """Database representation of a scoped notification."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_scope_user", "scope", "user_id", "created_at"),
        Index("ix_notification_scope_team", "scope", "team_id", "created_at"),
        Index("ix_notification_scope_super", "scope", "super_role", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    type = Column(String(30), nullable=False, index=True)
    scope = Column(String(10), nullable=False)
    user_id = Column(String(64), nullable=True)
    team_id = Column(String(64), nullable=True)
    super_role = Column(String(20), nullable=True)
    title = Column(Text, nullable=False)
    category = Column(String(120), nullable=False)
    avatar_url = Column(String(500), nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    is_unread = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    is_archived = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    created_at = Column(DateTime(), nullable=False, index=True)
    expires_at = Column(DateTime(), nullable=False, index=True)


__all__ = ["NotificationModel"]
