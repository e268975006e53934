"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.attributes import flag_modified

from notification_hub.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationScope,
    NotificationStats,
)
from notification_hub.domain.errors import NotificationNotFoundError
from notification_hub.infrastructure.models import NotificationModel
from notification_hub.infrastructure.notifications.change_feed import (
    NOTIFICATION_DELETED,
    NOTIFICATION_UPDATED,
    record_changes,
    snapshot_model,
)
from notification_hub.utils import ensure_app_naive_datetime, ensure_app_timezone

SNAPSHOT_CHUNK_SIZE = 500

_TARGET_COLUMNS = {
    NotificationScope.USER.value: NotificationModel.user_id,
    NotificationScope.TEAM.value: NotificationModel.team_id,
    NotificationScope.SUPER.value: NotificationModel.super_role,
}


class NotificationRepository:
    """Provide CRUD and batch operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model else None

    def list_for_target(
        self,
        scope: str,
        target_id: str,
        filters: NotificationFilters | None = None,
    ) -> Sequence[Notification]:
        filters = filters or NotificationFilters()
        query = self._target_query(scope, target_id)
        if filters.unread_only:
            query = query.filter(NotificationModel.is_unread.is_(True))
        if filters.archived_only:
            query = query.filter(NotificationModel.is_archived.is_(True))
        if filters.type:
            query = query.filter(NotificationModel.type == filters.type.upper())
        if filters.start_date is not None:
            query = query.filter(
                NotificationModel.created_at
                >= ensure_app_naive_datetime(filters.start_date)
            )
        if filters.end_date is not None:
            query = query.filter(
                NotificationModel.created_at
                <= ensure_app_naive_datetime(filters.end_date)
            )
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        query = query.offset(max(filters.offset, 0)).limit(filters.limit)
        return [self._to_entity(model) for model in query.all()]

    def count_unread(self, scope: str, target_id: str) -> int:
        return (
            self._target_query(scope, target_id)
            .filter(NotificationModel.is_unread.is_(True))
            .count()
        )

    def set_flags(
        self,
        notification_id: str,
        *,
        is_unread: bool | None = None,
        is_archived: bool | None = None,
    ) -> Notification:
        """Update read/archive state; the row is always written."""

        model = self._get_model(notification_id)
        if is_unread is not None:
            model.is_unread = is_unread
            flag_modified(model, "is_unread")
        if is_archived is not None:
            model.is_archived = is_archived
            flag_modified(model, "is_archived")
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_read(self, scope: str, target_id: str) -> int:
        query = self._target_query(scope, target_id).filter(
            NotificationModel.is_unread.is_(True)
        )
        snapshots = []
        for snapshot in self._stream_snapshots(query):
            snapshot["is_unread"] = False
            snapshots.append(snapshot)
        if not snapshots:
            return 0
        count = query.update(
            {NotificationModel.is_unread: False}, synchronize_session=False
        )
        record_changes(self.session, NOTIFICATION_UPDATED, snapshots)
        self.session.commit()
        return count

    def delete(self, notification_id: str) -> None:
        model = self._get_model(notification_id)
        self.session.delete(model)
        self.session.commit()

    def delete_matching(self, *criteria) -> int:
        """Delete every row matching ``criteria`` in a single batch statement."""

        query = self.session.query(NotificationModel).filter(*criteria)
        snapshots = list(self._stream_snapshots(query, expunge=True))
        if not snapshots:
            return 0
        count = query.delete(synchronize_session=False)
        record_changes(self.session, NOTIFICATION_DELETED, snapshots)
        self.session.commit()
        return count

    def stats(self, now: datetime) -> NotificationStats:
        naive_now = ensure_app_naive_datetime(now)

        def count(*criteria) -> int:
            query = self.session.query(func.count(NotificationModel.id))
            return int(query.filter(*criteria).scalar() or 0)

        return NotificationStats(
            total=count(),
            unread=count(NotificationModel.is_unread.is_(True)),
            archived=count(NotificationModel.is_archived.is_(True)),
            expired=count(NotificationModel.expires_at <= naive_now),
        )

    def _stream_snapshots(self, query: Query, *, expunge: bool = False) -> Iterator[dict]:
        """Yield change-feed snapshots of ``query`` rows, fetched in chunks."""

        for model in query.yield_per(SNAPSHOT_CHUNK_SIZE):
            snapshot = snapshot_model(model)
            if expunge:
                self.session.expunge(model)
            yield snapshot

    def _target_query(self, scope: str, target_id: str) -> Query:
        column = _TARGET_COLUMNS[scope]
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.scope == scope)
            .filter(column == target_id)
        )

    def _get_model(self, notification_id: str) -> NotificationModel:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            raise NotificationNotFoundError(notification_id)
        return model

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, notification: Notification
    ) -> None:
        if notification.id:
            model.id = notification.id
        model.type = notification.type
        model.scope = notification.scope
        model.user_id = notification.user_id
        model.team_id = notification.team_id
        model.super_role = notification.super_role
        model.title = notification.title
        model.category = notification.category
        model.avatar_url = notification.avatar_url
        model.metadata_ = notification.metadata
        model.is_unread = notification.is_unread
        model.is_archived = notification.is_archived
        model.created_at = ensure_app_naive_datetime(notification.created_at)
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            type=model.type,
            scope=model.scope,
            title=model.title,
            category=model.category,
            user_id=model.user_id,
            team_id=model.team_id,
            super_role=model.super_role,
            avatar_url=model.avatar_url,
            metadata=model.metadata_,
            is_unread=model.is_unread,
            is_archived=model.is_archived,
            created_at=ensure_app_timezone(model.created_at),
            expires_at=ensure_app_timezone(model.expires_at),
        )


__all__ = ["NotificationRepository"]
