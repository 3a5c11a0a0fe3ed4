"""Passcode gate: stores, verifies and rotates the shared secret."""

import hmac
import logging

from sqlalchemy.orm import Session

from yappy.config import Settings, get_settings
from yappy.exceptions import IncorrectPasscodeError, NotConfiguredError, ValidationError
from yappy.models import ConfigEntry
from yappy.services.policy import ModerationPolicy

logger = logging.getLogger(__name__)


class PasscodeService:
    """Service for the passcode stored in the config table."""

    def __init__(self, db: Session, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.policy = ModerationPolicy(db)

    def get_or_initialize(self) -> str:
        """Return the stored passcode, seeding it from CHAT_PASSCODE if absent."""
        entry = self.db.get(ConfigEntry, ConfigEntry.PASSCODE)
        if entry is not None and entry.value:
            return entry.value

        fallback = self.settings.chat_passcode
        if not fallback:
            raise NotConfiguredError("Passcode not configured")

        self._store(fallback)
        self.db.commit()
        logger.info("Passcode initialized from environment")
        return fallback

    def verify(self, candidate: str) -> bool:
        """Check a candidate against the current passcode."""
        current = self.get_or_initialize()
        candidate = (candidate or "").strip()
        return hmac.compare_digest(candidate.encode("utf-8"), current.encode("utf-8"))

    def verify_or_raise(self, candidate: str) -> None:
        if not self.verify(candidate):
            raise IncorrectPasscodeError("Incorrect passcode")

    def update(self, new_passcode: str, requesting_user_id: int) -> None:
        """Replace the passcode. Admin only."""
        new_passcode = new_passcode.strip()
        self.policy.require_admin(requesting_user_id, "update the passcode")
        if not new_passcode:
            raise ValidationError("Passcode cannot be empty")

        self._store(new_passcode)
        self.db.commit()
        logger.info(f"Passcode updated by admin {requesting_user_id}")

    def _store(self, value: str) -> None:
        entry = self.db.get(ConfigEntry, ConfigEntry.PASSCODE)
        if entry is None:
            self.db.add(ConfigEntry(key=ConfigEntry.PASSCODE, value=value))
        else:
            entry.value = value
