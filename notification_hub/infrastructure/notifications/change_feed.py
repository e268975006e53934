"""In-process change feed for committed notification mutations.

Mapper events capture a snapshot of every inserted, updated or deleted
notification row into the owning session. Snapshots are published once the
session commits and discarded on rollback, so listeners only ever observe
durable changes.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, DefaultDict, Iterable

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session, object_session

from notification_hub.domain.entities import NotificationScope
from notification_hub.domain.errors import NotificationValidationError
from notification_hub.infrastructure.models import NotificationModel
from notification_hub.utils import ensure_app_timezone

logger = logging.getLogger(__name__)

NOTIFICATION_CREATED = "notification_created"
NOTIFICATION_UPDATED = "notification_updated"
NOTIFICATION_DELETED = "notification_deleted"

_PENDING_CHANGES_KEY = "notification_hub.pending_changes"

ChangeListener = Callable[[str, dict[str, Any]], None]


def channel_name(scope: str | NotificationScope, target_id: str) -> str:
    """Return the realtime channel carrying changes for ``scope``/``target_id``."""

    normalized = getattr(scope, "value", scope)
    normalized = str(normalized or "").upper()
    if normalized == NotificationScope.USER.value:
        return f"notifications-user-{target_id}"
    if normalized == NotificationScope.TEAM.value:
        return f"notifications-team-{target_id}"
    if normalized == NotificationScope.SUPER.value:
        return f"notifications-super-{str(target_id).lower()}"
    raise NotificationValidationError(f"Unknown notification scope '{scope}'")


def channel_for_snapshot(snapshot: dict[str, Any]) -> str | None:
    scope = snapshot.get("scope")
    target = {
        NotificationScope.USER.value: snapshot.get("user_id"),
        NotificationScope.TEAM.value: snapshot.get("team_id"),
        NotificationScope.SUPER.value: snapshot.get("super_role"),
    }.get(scope)
    if not target:
        return None
    return channel_name(scope, target)


def snapshot_model(model: NotificationModel) -> dict[str, Any]:
    """Return a JSON-serializable copy of the row held by ``model``."""

    snapshot: dict[str, Any] = {}
    for attribute in inspect(model).mapper.column_attrs:
        key = "metadata" if attribute.key == "metadata_" else attribute.key
        value = getattr(model, attribute.key)
        if isinstance(value, datetime):
            value = ensure_app_timezone(value).isoformat()
        elif isinstance(value, dict):
            value = dict(value)
        snapshot[key] = value
    return snapshot


class NotificationChangeFeed:
    """Route committed notification changes to per-channel listeners."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, list[ChangeListener]] = defaultdict(list)
        self._lock = threading.Lock()

    def listen(self, channel: str, listener: ChangeListener) -> Callable[[], None]:
        """Register ``listener`` for ``channel`` and return an idempotent remover."""

        with self._lock:
            self._listeners[channel].append(listener)

        removed = False

        def remove() -> None:
            nonlocal removed
            with self._lock:
                if removed:
                    return
                removed = True
                listeners = self._listeners.get(channel)
                if listeners is None:
                    return
                try:
                    listeners.remove(listener)
                except ValueError:
                    pass
                if not listeners:
                    self._listeners.pop(channel, None)

        return remove

    def listener_count(self, channel: str) -> int:
        with self._lock:
            return len(self._listeners.get(channel, ()))

    def publish(self, kind: str, snapshot: dict[str, Any]) -> None:
        """Deliver a change to every listener of the snapshot's channel."""

        channel = channel_for_snapshot(snapshot)
        if channel is None:
            return
        with self._lock:
            listeners = list(self._listeners.get(channel, ()))
        for listener in listeners:
            try:
                listener(kind, dict(snapshot))
            except Exception:
                logger.exception("Realtime listener failed on %s for %s", channel, kind)

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()


notification_change_feed = NotificationChangeFeed()


def record_change(session: Session, kind: str, snapshot: dict[str, Any]) -> None:
    """Queue ``snapshot`` for publication when ``session`` commits."""

    session.info.setdefault(_PENDING_CHANGES_KEY, []).append((kind, snapshot))


def record_changes(
    session: Session, kind: str, snapshots: Iterable[dict[str, Any]]
) -> None:
    for snapshot in snapshots:
        record_change(session, kind, snapshot)


def _capture(kind: str) -> Callable[..., None]:
    def listener(mapper, connection, target: NotificationModel) -> None:
        session = object_session(target)
        if session is not None:
            record_change(session, kind, snapshot_model(target))

    return listener


event.listen(NotificationModel, "after_insert", _capture(NOTIFICATION_CREATED))
event.listen(NotificationModel, "after_update", _capture(NOTIFICATION_UPDATED))
event.listen(NotificationModel, "after_delete", _capture(NOTIFICATION_DELETED))


@event.listens_for(Session, "after_commit")
def _publish_pending_changes(session: Session) -> None:
    pending = session.info.pop(_PENDING_CHANGES_KEY, None)
    if not pending:
        return
    for kind, snapshot in pending:
        notification_change_feed.publish(kind, snapshot)


@event.listens_for(Session, "after_rollback")
def _discard_pending_changes(session: Session) -> None:
    session.info.pop(_PENDING_CHANGES_KEY, None)


__all__ = [
    "NOTIFICATION_CREATED",
    "NOTIFICATION_DELETED",
    "NOTIFICATION_UPDATED",
    "NotificationChangeFeed",
    "channel_for_snapshot",
    "channel_name",
    "notification_change_feed",
    "record_change",
    "record_changes",
    "snapshot_model",
]
