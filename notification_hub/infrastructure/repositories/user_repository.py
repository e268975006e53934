"""Lookups over users and team rosters used to resolve push recipients."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from notification_hub.domain.entities import User
from notification_hub.infrastructure.models import TeamMemberModel, UserModel


class UserRepository:
    """Read access to recipients and their privileged roles."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> User | None:
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel(
            id=user.id,
            email=user.email,
            name=user.name,
            super_role=user.super_role.upper() if user.super_role else None,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_ids_by_super_roles(self, roles: Iterable[str]) -> list[str]:
        normalized = sorted({role.upper() for role in roles if role})
        if not normalized:
            return []
        query = (
            self.session.query(UserModel.id)
            .filter(func.upper(UserModel.super_role).in_(normalized))
            .order_by(UserModel.id)
        )
        return [user_id for (user_id,) in query.all()]

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id, email=model.email, name=model.name, super_role=model.super_role
        )


class TeamMembershipRepository:
    """Current roster lookups for teams."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add_member(self, team_id: str, user_id: str) -> None:
        self.session.add(TeamMemberModel(team_id=team_id, user_id=user_id))
        self.session.commit()

    def remove_member(self, team_id: str, user_id: str) -> None:
        self.session.query(TeamMemberModel).filter(
            TeamMemberModel.team_id == team_id, TeamMemberModel.user_id == user_id
        ).delete(synchronize_session=False)
        self.session.commit()

    def list_user_ids(self, team_id: str) -> Sequence[str]:
        query = (
            self.session.query(TeamMemberModel.user_id)
            .filter(TeamMemberModel.team_id == team_id)
            .order_by(TeamMemberModel.user_id)
        )
        return [user_id for (user_id,) in query.all()]


__all__ = ["TeamMembershipRepository", "UserRepository"]
