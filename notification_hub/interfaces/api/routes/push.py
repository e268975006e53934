"""Endpoints for registering devices and testing push delivery."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from notification_hub.application.use_cases.notifications import NotificationDispatcher
from notification_hub.application.use_cases.push_subscriptions import (
    list_user_subscriptions,
    subscribe_to_apns,
    subscribe_to_push,
    unsubscribe_from_push,
)
from notification_hub.config import Settings
from notification_hub.domain.entities import PushSubscription
from notification_hub.infrastructure.database import get_db
from notification_hub.interfaces.api.dependencies import get_app_settings, get_dispatcher
from notification_hub.interfaces.api.routes_helpers import translate_domain_errors
from notification_hub.interfaces.api.schemas import (
    ApnsSubscriptionCreate,
    PushSubscriptionCreate,
    PushSubscriptionRead,
    PushTestResponse,
    PushUnsubscribeRequest,
    PushUnsubscribeResponse,
    VapidPublicKeyRead,
)

router = APIRouter(prefix="/push", tags=["push"])


def _to_read_model(subscription: PushSubscription) -> PushSubscriptionRead:
    return PushSubscriptionRead.model_validate(subscription)


def _user_agent(explicit: str | None, request: Request) -> str | None:
    return explicit or request.headers.get("user-agent")


@router.get("/vapid-public-key", response_model=VapidPublicKeyRead)
def read_vapid_public_key(
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> VapidPublicKeyRead:
    """Return the key browsers need to create a Web Push subscription."""

    return VapidPublicKeyRead(public_key=dispatcher.get_vapid_public_key())


@router.post(
    "/subscriptions",
    response_model=PushSubscriptionRead,
    status_code=status.HTTP_201_CREATED,
)
def register_web_push(
    payload: PushSubscriptionCreate,
    request: Request,
    db: Session = Depends(get_db),
) -> PushSubscriptionRead:
    with translate_domain_errors():
        subscription = subscribe_to_push(
            db,
            payload.user_id,
            endpoint=payload.endpoint,
            p256dh=payload.keys.p256dh,
            auth=payload.keys.auth,
            user_agent=_user_agent(payload.user_agent, request),
            device_type=payload.device_type,
        )
    return _to_read_model(subscription)


@router.post(
    "/subscriptions/apns",
    response_model=PushSubscriptionRead,
    status_code=status.HTTP_201_CREATED,
)
def register_apns(
    payload: ApnsSubscriptionCreate,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PushSubscriptionRead:
    with translate_domain_errors():
        subscription = subscribe_to_apns(
            db,
            payload.user_id,
            payload.apns_token,
            bundle_id=payload.bundle_id,
            environment=payload.environment,
            user_agent=_user_agent(payload.user_agent, request),
            device_type=payload.device_type,
            settings=settings,
        )
    return _to_read_model(subscription)


@router.post("/subscriptions/unsubscribe", response_model=PushUnsubscribeResponse)
def unregister(
    payload: PushUnsubscribeRequest, db: Session = Depends(get_db)
) -> PushUnsubscribeResponse:
    """Deactivate an endpoint; unknown endpoints report ``success: false``."""

    with translate_domain_errors():
        success = unsubscribe_from_push(db, payload.endpoint)
    return PushUnsubscribeResponse(success=success)


@router.get("/subscriptions/{user_id}", response_model=list[PushSubscriptionRead])
def read_user_subscriptions(
    user_id: str,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
) -> list[PushSubscriptionRead]:
    with translate_domain_errors():
        subscriptions = list_user_subscriptions(
            db, user_id, active_only=not include_inactive
        )
    return [_to_read_model(subscription) for subscription in subscriptions]


@router.post("/test/{user_id}", response_model=PushTestResponse)
async def send_test_push(
    user_id: str,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> PushTestResponse:
    """Send a synthetic push to every active device of ``user_id``."""

    result = await dispatcher.send_test_push(user_id)
    return PushTestResponse(
        success=result.sent > 0,
        message=f"Sent: {result.sent}, Failed: {result.failed}",
        sent=result.sent,
        failed=result.failed,
    )
