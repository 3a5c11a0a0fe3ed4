"""User directory: create, list and delete users, and manage the admin role."""

import logging
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yappy.exceptions import (
    CannotDeleteSoleUserError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from yappy.models import MessageHidden, MessageReaction, PushSubscription, User
from yappy.services.policy import ModerationPolicy

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 50


def normalize_name(name: str) -> str:
    """Normalize a display name for case-insensitive matching."""
    return name.strip().lower()


@dataclass
class UserView:
    """A user together with its computed admin flag."""

    user: User
    is_admin: bool


class UserService:
    """Service for the user directory."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.policy = ModerationPolicy(db)

    def list_users(self) -> list[UserView]:
        """All users, oldest first."""
        users = self.db.scalars(select(User).order_by(User.created_at, User.id)).all()
        admin_id = self.policy.get_admin_user_id()
        return [UserView(user=u, is_admin=u.id == admin_id) for u in users]

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found", error_code="USER_NOT_FOUND")
        return user

    def create_or_get(self, name: str) -> UserView:
        """Return the user with this name, creating it if needed.

        The first user ever created becomes the admin.
        """
        display_name = (name or "").strip()
        if not display_name:
            raise ValidationError("Name is required", error_code="MISSING_NAME")
        if len(display_name) > MAX_NAME_LENGTH:
            raise ValidationError(f"Name must be at most {MAX_NAME_LENGTH} characters")

        normalized = normalize_name(display_name)
        user = self._find_by_normalized_name(normalized)
        if user is None:
            user = User(name=display_name, normalized_name=normalized)
            self.db.add(user)
            try:
                self.db.commit()
                logger.info(f"Created user {user.id} ({display_name})")
            except IntegrityError:
                # Same name created concurrently; use that record
                self.db.rollback()
                user = self._find_by_normalized_name(normalized)

        if self.policy.claim_admin_if_vacant(user.id):
            logger.info(f"User {user.id} is the first user and became admin")
        self.db.refresh(user)

        return UserView(user=user, is_admin=self.policy.is_admin(user.id))

    def set_admin(self, target_user_id: int, requester_id: int | None) -> None:
        """Hand the admin role to target_user_id."""
        if not self.policy.can_assign_admin(requester_id):
            logger.warning(f"Rejected admin reassignment by user {requester_id}")
            raise PermissionDeniedError("Only the current admin can assign a new admin")

        self.get_user(target_user_id)
        self.policy.set_admin(target_user_id)
        self.db.commit()
        logger.info(f"Admin role assigned to user {target_user_id} by {requester_id}")

    def delete_user(self, target_user_id: int, requester_id: int | None) -> None:
        """Delete a user. Admin only.

        Deleting the admin first hands the role to another user; deleting the
        only remaining user is refused.
        """
        target = self.get_user(target_user_id)
        self.policy.require_admin(requester_id, "delete users")

        if self.policy.is_admin(target.id):
            successor = self.db.scalar(
                select(User)
                .where(User.id != target.id)
                .order_by(User.created_at, User.id)
                .limit(1)
            )
            if successor is None:
                raise CannotDeleteSoleUserError(
                    "Cannot delete the only user. Add another user first, or reset the app."
                )
            self.policy.set_admin(successor.id)
            logger.info(f"Admin role passed to user {successor.id} before deleting {target.id}")

        self.db.execute(delete(MessageHidden).where(MessageHidden.user_id == target.id))
        self.db.execute(delete(MessageReaction).where(MessageReaction.user_id == target.id))
        self.db.execute(delete(PushSubscription).where(PushSubscription.user_id == target.id))
        self.db.delete(target)
        self.db.commit()
        logger.info(f"Deleted user {target_user_id} (requested by {requester_id})")

    def reset(self, requester_id: int | None) -> int:
        """Remove every user and leave the admin role vacant. Admin only.

        Messages stay; the next user created claims the admin role.
        Returns the number of users removed.
        """
        self.policy.require_admin(requester_id, "reset the app")

        self.db.execute(delete(MessageHidden))
        self.db.execute(delete(MessageReaction))
        self.db.execute(delete(PushSubscription))
        result = self.db.execute(delete(User))
        self.policy.clear_admin()
        self.db.commit()
        logger.info(f"App reset by admin {requester_id}: {result.rowcount} users removed")
        return result.rowcount

    def _find_by_normalized_name(self, normalized: str) -> User | None:
        return self.db.scalar(select(User).where(User.normalized_name == normalized))
