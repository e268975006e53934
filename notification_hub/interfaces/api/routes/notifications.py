"""Endpoints and websocket handler for scoped notifications."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from notification_hub.application.use_cases.notifications import (
    MAX_LIST_LIMIT,
    NotificationDispatcher,
    archive_notification,
    delete_notification,
    get_notification,
    get_unread_count,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
    resolve_target,
    unarchive_notification,
)
from notification_hub.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationRequest,
    NotificationScope,
)
from notification_hub.domain.errors import (
    NotificationNotFoundError,
    NotificationValidationError,
)
from notification_hub.infrastructure.database import get_db
from notification_hub.infrastructure.notifications import (
    RealtimeClient,
    WebsocketEventForwarder,
    channel_name,
    notification_manager,
    serialize_notification,
)
from notification_hub.interfaces.api.dependencies import get_dispatcher, get_realtime
from notification_hub.interfaces.api.routes_helpers import translate_domain_errors
from notification_hub.interfaces.api.schemas import (
    MarkAllReadResponse,
    NotificationBase,
    NotificationBatchCreate,
    NotificationCreate,
    NotificationRead,
    PushTriggerResponse,
    UnreadCountRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _to_read_model(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


def _to_request(payload: NotificationBase) -> NotificationRequest:
    return NotificationRequest(
        type=payload.type,
        scope=payload.scope,
        title=payload.title,
        category=payload.category,
        user_id=payload.user_id,
        team_id=payload.team_id,
        super_role=payload.super_role,
        avatar_url=payload.avatar_url,
        metadata=payload.metadata,
        expires_in_days=payload.expires_in_days,
    )


@router.post("/", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def send_notification(
    payload: NotificationCreate,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> NotificationRead:
    """Persist a notification and start push delivery in the background."""

    with translate_domain_errors():
        notification = dispatcher.send_notification(
            _to_request(payload), skip_push=payload.skip_push
        )
    return _to_read_model(notification)


@router.post(
    "/batch", response_model=list[NotificationRead], status_code=status.HTTP_201_CREATED
)
def send_notification_batch(
    payload: NotificationBatchCreate,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> list[NotificationRead]:
    """Dispatch every item independently; only the successes are returned."""

    created = dispatcher.send_notification_batch(
        [_to_request(item) for item in payload.notifications],
        skip_push=payload.skip_push,
    )
    return [_to_read_model(notification) for notification in created]


@router.get("/{scope}/{target_id}", response_model=list[NotificationRead])
def list_target_notifications(
    scope: str,
    target_id: str,
    unread_only: bool = False,
    archived_only: bool = False,
    type: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int = Query(50, ge=1, le=MAX_LIST_LIMIT),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> list[NotificationRead]:
    """Return the notifications addressed to one target, newest first."""

    filters = NotificationFilters(
        unread_only=unread_only,
        archived_only=archived_only,
        type=type,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    with translate_domain_errors():
        notifications = list_notifications(db, scope, target_id, filters)
    return [_to_read_model(notification) for notification in notifications]


@router.get("/{scope}/{target_id}/unread-count", response_model=UnreadCountRead)
def read_unread_count(
    scope: str, target_id: str, db: Session = Depends(get_db)
) -> UnreadCountRead:
    with translate_domain_errors():
        count = get_unread_count(db, scope, target_id)
    return UnreadCountRead(count=count)


@router.post("/{scope}/{target_id}/read-all", response_model=MarkAllReadResponse)
def mark_target_read(
    scope: str, target_id: str, db: Session = Depends(get_db)
) -> MarkAllReadResponse:
    with translate_domain_errors():
        scope_value, target = resolve_target(scope, target_id)
        field = {
            NotificationScope.USER.value: "user_id",
            NotificationScope.TEAM.value: "team_id",
            NotificationScope.SUPER.value: "super_role",
        }[scope_value]
        updated = mark_all_as_read(db, **{field: target})
    return MarkAllReadResponse(updated=updated)


@router.get("/{notification_id}", response_model=NotificationRead)
def read_notification(notification_id: str, db: Session = Depends(get_db)) -> NotificationRead:
    with translate_domain_errors():
        notification = get_notification(db, notification_id)
    if notification is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(NotificationNotFoundError(notification_id)),
        )
    return _to_read_model(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_notification(notification_id: str, db: Session = Depends(get_db)) -> Response:
    with translate_domain_errors():
        delete_notification(db, notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{notification_id}/read", response_model=NotificationRead)
def read_one(notification_id: str, db: Session = Depends(get_db)) -> NotificationRead:
    with translate_domain_errors():
        notification = mark_as_read(db, notification_id)
    return _to_read_model(notification)


@router.post("/{notification_id}/archive", response_model=NotificationRead)
def archive_one(notification_id: str, db: Session = Depends(get_db)) -> NotificationRead:
    with translate_domain_errors():
        notification = archive_notification(db, notification_id)
    return _to_read_model(notification)


@router.post("/{notification_id}/unarchive", response_model=NotificationRead)
def unarchive_one(notification_id: str, db: Session = Depends(get_db)) -> NotificationRead:
    with translate_domain_errors():
        notification = unarchive_notification(db, notification_id)
    return _to_read_model(notification)


@router.post("/{notification_id}/push", response_model=PushTriggerResponse)
async def push_notification(
    notification_id: str,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> PushTriggerResponse:
    """Run push delivery again for a stored notification."""

    outcome = await dispatcher.send_push_for_notification(notification_id)
    return PushTriggerResponse(**outcome)


@router.websocket("/ws/{scope}/{target_id}")
async def notifications_websocket(
    websocket: WebSocket,
    scope: str,
    target_id: str,
    db: Session = Depends(get_db),
    realtime: RealtimeClient = Depends(get_realtime),
) -> None:
    """Stream the live changes of one scope target to the browser."""

    try:
        scope_value, target = resolve_target(scope, target_id)
        pending = list_notifications(
            db, scope_value, target, NotificationFilters(unread_only=True)
        )
    except NotificationValidationError:
        await websocket.close(code=1008)
        return

    channel = channel_name(scope_value, target)
    forwarder = WebsocketEventForwarder(
        notification_manager, channel, asyncio.get_running_loop()
    )
    await notification_manager.connect(
        channel,
        websocket,
        subscribe=lambda: realtime.subscribe(scope_value, target, forwarder),
    )
    try:
        await websocket.send_json(
            {"type": "init", "data": [serialize_notification(n) for n in pending]}
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if not isinstance(ids, list):
                    continue
                for notification_id in dict.fromkeys(ids):
                    try:
                        mark_as_read(db, str(notification_id))
                    except NotificationNotFoundError:
                        logger.debug("Ignoring ack for unknown notification %s", notification_id)
    except WebSocketDisconnect:
        notification_manager.disconnect(channel, websocket)
    except Exception:
        notification_manager.disconnect(channel, websocket)
        raise
