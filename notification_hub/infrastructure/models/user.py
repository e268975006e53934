"""SQLAlchemy models for users and team rosters."""

from uuid import uuid4

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from notification_hub.infrastructure.database import Base


class UserModel(Base):
    """Database representation of a notification recipient."""

    __tablename__ = "user"

    id = Column(String(64), primary_key=True)
    email = Column(String(120), nullable=False, index=True)
    name = Column(String(120), nullable=True)
    super_role = Column(String(20), nullable=True, index=True)


class TeamMemberModel(Base):
    """Membership of a user in a team."""

    __tablename__ = "team_member"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_member"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    team_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("user.id"), nullable=False, index=True)


__all__ = ["TeamMemberModel", "UserModel"]
