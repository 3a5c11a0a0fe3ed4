"""Web push delivery to subscribers who follow a given sender."""

import json
import logging

from pywebpush import WebPushException, webpush
from requests.exceptions import RequestException
from sqlalchemy import select
from sqlalchemy.orm import Session

from yappy.config import Settings, get_settings
from yappy.models import Message, PushSubscription, User

logger = logging.getLogger(__name__)

APP_TITLE = "Yappy Notes"
PREVIEW_LENGTH = 100
PUSH_TTL_SECONDS = 43200
# Push services answer 404/410 for subscriptions that will never work again
GONE_STATUS_CODES = (404, 410)


def message_preview(message: Message) -> str:
    """Short notification body for a message."""
    if message.text:
        return message.text[:PREVIEW_LENGTH]
    if message.image_base64:
        return "Sent a photo"
    if message.audio_base64:
        return "Sent a voice message"
    return ""


class NotificationService:
    """Service for sending web push notifications."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @property
    def is_configured(self) -> bool:
        return self.settings.push_configured

    def upsert_subscription(
        self,
        db: Session,
        user_id: int,
        endpoint: str,
        p256dh_key: str,
        auth_key: str,
        notify_user_ids: list[int],
        expiration_time: int | None = None,
    ) -> PushSubscription:
        """Create or replace the subscription stored for an endpoint."""
        subscription = db.scalar(
            select(PushSubscription).where(PushSubscription.endpoint == endpoint)
        )
        if subscription is None:
            subscription = PushSubscription(endpoint=endpoint)
            db.add(subscription)

        subscription.user_id = user_id
        subscription.p256dh_key = p256dh_key
        subscription.auth_key = auth_key
        subscription.expiration_time = expiration_time
        # Dedupe, keep order
        subscription.notify_user_ids = list(dict.fromkeys(notify_user_ids))

        db.commit()
        db.refresh(subscription)
        logger.info(
            f"Push subscription {subscription.id} saved for user {user_id} "
            f"(following {subscription.notify_user_ids})"
        )
        return subscription

    def subscriptions_following(self, db: Session, sender_user_id: int) -> list[PushSubscription]:
        """Subscriptions that asked for pushes about sender_user_id."""
        subscriptions = db.scalars(select(PushSubscription)).all()
        return [s for s in subscriptions if s.wants_pushes_from(sender_user_id)]

    def notify_followers(self, db: Session, sender_user_id: int, body: str) -> int:
        """Push body to every subscriber following sender_user_id.

        Returns the number of notifications delivered.
        """
        if not self.is_configured:
            logger.warning("Push notifications not configured")
            return 0

        subscriptions = self.subscriptions_following(db, sender_user_id)
        if not subscriptions:
            logger.info(f"No push subscribers for user {sender_user_id}")
            return 0

        payload = json.dumps({"title": APP_TITLE, "body": body, "icon": "/icon-192.png"})

        success_count = 0
        for sub in subscriptions:
            if self._send(db, sub, payload):
                success_count += 1

        db.commit()
        logger.info(
            f"Sent push to {success_count}/{len(subscriptions)} devices "
            f"following user {sender_user_id}"
        )
        return success_count

    def notify_new_message(self, db: Session, message: Message) -> int:
        sender = db.get(User, message.sender_user_id)
        sender_name = sender.name if sender else "Someone"
        return self.notify_followers(
            db, message.sender_user_id, f"{sender_name}: {message_preview(message)}"
        )

    def notify_app_opened(self, db: Session, user: User) -> int:
        return self.notify_followers(db, user.id, f"{user.name} opened the app")

    def _send(self, db: Session, sub: PushSubscription, payload: str) -> bool:
        try:
            webpush(
                subscription_info={
                    "endpoint": sub.endpoint,
                    "keys": {
                        "p256dh": sub.p256dh_key,
                        "auth": sub.auth_key,
                    },
                },
                data=payload,
                vapid_private_key=self.settings.vapid_private_key,
                vapid_claims={
                    "sub": f"mailto:{self.settings.vapid_email}",
                },
                ttl=PUSH_TTL_SECONDS,
            )
            return True
        except WebPushException as e:
            logger.error(f"Push failed for subscription {sub.id}: {e}")
            if e.response is not None and e.response.status_code in GONE_STATUS_CODES:
                logger.info(f"Removing expired subscription {sub.id}")
                db.delete(sub)
            return False
        except RequestException as e:
            # Push service unreachable; the next follower still gets tried
            logger.error(f"Push transport error for subscription {sub.id}: {e}")
            return False
