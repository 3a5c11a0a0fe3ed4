"""Push notification API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from yappy.api.dependencies import get_notification_service, get_policy
from yappy.database import get_db
from yappy.schemas.common import SuccessResponse, UserActionRequest
from yappy.schemas.push import PushSubscribeRequest, VapidPublicKeyResponse
from yappy.services.notification_service import NotificationService
from yappy.services.policy import ModerationPolicy
from yappy.tasks.push import send_app_opened_push

router = APIRouter(prefix="/api/v1/push", tags=["push"])


@router.get("/vapid-public-key", response_model=VapidPublicKeyResponse)
def get_vapid_public_key(
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Get the VAPID public key for push subscription."""
    if not notifications.is_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="VAPID not configured"
        )
    return VapidPublicKeyResponse(public_key=notifications.settings.vapid_public_key)


@router.post("/subscribe", response_model=SuccessResponse)
def subscribe_push(
    data: PushSubscribeRequest,
    db: Annotated[Session, Depends(get_db)],
    policy: Annotated[ModerationPolicy, Depends(get_policy)],
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Save or update the push subscription for this browser endpoint."""
    policy.require_user(data.user_id)
    notifications.upsert_subscription(
        db,
        user_id=data.user_id,
        endpoint=data.subscription.endpoint,
        p256dh_key=data.subscription.keys.p256dh,
        auth_key=data.subscription.keys.auth,
        notify_user_ids=data.notify_user_ids,
        expiration_time=data.subscription.expiration_time,
    )
    return SuccessResponse()


@router.post("/notify-opened", response_model=SuccessResponse)
def notify_app_opened(
    data: UserActionRequest,
    policy: Annotated[ModerationPolicy, Depends(get_policy)],
    notifications: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Tell everyone following this user that they opened the app."""
    if not notifications.is_configured:
        return SuccessResponse()

    policy.require_user(data.user_id)
    send_app_opened_push.delay(data.user_id)
    return SuccessResponse()
