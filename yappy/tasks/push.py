"""Celery tasks for web push delivery."""

import logging

from yappy.celery_app import app as celery_app
from yappy.database import SessionLocal
from yappy.models import Message, User
from yappy.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@celery_app.task
def send_message_push(message_id: int) -> dict:
    """Notify everyone following the sender of a new message.

    Args:
        message_id: ID of the message that was just created

    Returns:
        dict with the number of notifications sent
    """
    db = SessionLocal()
    try:
        message = db.get(Message, message_id)
        if not message:
            # Deleted before the worker got to it
            return {"error": "Message not found"}

        sent = NotificationService().notify_new_message(db, message)
        return {"sent": sent}
    except Exception as e:
        logger.error(f"Error sending push for message {message_id}: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}
    finally:
        db.close()


@celery_app.task
def send_app_opened_push(user_id: int) -> dict:
    """Notify everyone following a user that they just unlocked the app."""
    db = SessionLocal()
    try:
        user = db.get(User, user_id)
        if not user:
            return {"error": "User not found"}

        sent = NotificationService().notify_app_opened(db, user)
        return {"sent": sent}
    except Exception as e:
        logger.error(f"Error sending app-opened push for user {user_id}: {e}", exc_info=True)
        db.rollback()
        return {"error": str(e)}
    finally:
        db.close()
