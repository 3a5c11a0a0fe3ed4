"""Visibility and moderation rules, shared by every endpoint.

There is exactly one admin once any user exists. The admin is stored as a
single pointer row in the config table, so reassigning it is one write and
there is never a moment with zero or two admins.
"""

import logging

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from yappy.exceptions import NotFoundError, PermissionDeniedError
from yappy.models import ConfigEntry, Message, MessageHidden, User

logger = logging.getLogger(__name__)


class ModerationPolicy:
    """Answers who may see and do what."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # --- Admin pointer ---

    def get_admin_user_id(self) -> int | None:
        """Return the current admin's id, or None if no admin is set."""
        value = self.db.scalar(
            select(ConfigEntry.value).where(ConfigEntry.key == ConfigEntry.ADMIN_USER_ID)
        )
        return int(value) if value is not None else None

    def is_admin(self, user_id: int | None) -> bool:
        if user_id is None:
            return False
        return self.get_admin_user_id() == user_id

    def claim_admin_if_vacant(self, user_id: int) -> bool:
        """Make user_id the admin only if nobody is, and commit. Returns True if claimed.

        The config key is the primary key, so of two concurrent claims one
        commit fails with an IntegrityError and loses.
        """
        if self.get_admin_user_id() is not None:
            return False
        self.db.add(ConfigEntry(key=ConfigEntry.ADMIN_USER_ID, value=str(user_id)))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return False
        return True

    def set_admin(self, user_id: int) -> None:
        """Point the admin role at user_id in a single write."""
        result = self.db.execute(
            update(ConfigEntry)
            .where(ConfigEntry.key == ConfigEntry.ADMIN_USER_ID)
            .values(value=str(user_id))
        )
        if result.rowcount == 0:
            self.db.add(ConfigEntry(key=ConfigEntry.ADMIN_USER_ID, value=str(user_id)))

    def clear_admin(self) -> None:
        self.db.execute(delete(ConfigEntry).where(ConfigEntry.key == ConfigEntry.ADMIN_USER_ID))

    # --- Permission checks ---

    def require_user(self, user_id: int | None) -> User:
        """Resolve the acting user or fail."""
        user = self.db.get(User, user_id) if user_id is not None else None
        if user is None:
            raise NotFoundError("User not found", error_code="USER_NOT_FOUND")
        return user

    def require_admin(self, user_id: int | None, action: str) -> None:
        """Fail unless user_id is the current admin."""
        if not self.is_admin(user_id):
            logger.warning(f"Rejected '{action}' by non-admin user {user_id}")
            raise PermissionDeniedError(f"Only the admin can {action}")

    def can_assign_admin(self, requester_id: int | None) -> bool:
        """Anyone may assign while the role is vacant; afterwards only the admin."""
        admin_id = self.get_admin_user_id()
        return admin_id is None or admin_id == requester_id

    # --- Visibility ---

    def visible_messages_clause(self, viewer_id: int):
        """SQL condition selecting messages not hidden for viewer_id."""
        return ~exists().where(
            MessageHidden.message_id == Message.id,
            MessageHidden.user_id == viewer_id,
        )

    def sees_moderation_state(self, viewer_id: int | None) -> bool:
        """Admins see hidden messages, flagged with is_deleted."""
        return self.is_admin(viewer_id)
