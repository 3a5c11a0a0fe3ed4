"""FastAPI dependencies wiring services to the request's database session."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from yappy.database import get_db
from yappy.services.message_service import MessageService
from yappy.services.notification_service import NotificationService
from yappy.services.passcode_service import PasscodeService
from yappy.services.policy import ModerationPolicy
from yappy.services.user_service import UserService


def get_policy(db: Annotated[Session, Depends(get_db)]) -> ModerationPolicy:
    """Get the moderation policy bound to this request's session."""
    return ModerationPolicy(db)


def get_passcode_service(db: Annotated[Session, Depends(get_db)]) -> PasscodeService:
    """Get passcode service with dependencies."""
    return PasscodeService(db)


def get_user_service(db: Annotated[Session, Depends(get_db)]) -> UserService:
    """Get user service with dependencies."""
    return UserService(db)


def get_message_service(db: Annotated[Session, Depends(get_db)]) -> MessageService:
    """Get message service with dependencies."""
    return MessageService(db)


def get_notification_service() -> NotificationService:
    """Get notification service instance."""
    return NotificationService()
