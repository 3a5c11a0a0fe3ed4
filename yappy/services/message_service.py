"""Message store: create, page, hide, clear, react and mark seen."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import and_, delete, exists, insert, literal, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from yappy.config import Settings, get_settings
from yappy.exceptions import NotFoundError, ValidationError
from yappy.models import Message, MessageHidden, MessageReaction, User
from yappy.services.policy import ModerationPolicy

logger = logging.getLogger(__name__)

REPLY_SNIPPET_LENGTH = 100
PHOTO_SNIPPET = "Photo"
VOICE_SNIPPET = "Voice message"


def reply_snippet(target: Message) -> str:
    """Denormalized preview of a reply target."""
    if target.text:
        return target.text[:REPLY_SNIPPET_LENGTH]
    if target.image_base64:
        return PHOTO_SNIPPET
    if target.audio_base64:
        return VOICE_SNIPPET
    return ""


@dataclass
class MessagePageResult:
    """A page of messages, oldest first.

    deleted_ids is only set for admin viewers: the ids on this page that are
    hidden for at least one user.
    """

    messages: list[Message]
    has_more: bool
    deleted_ids: set[int] | None = None


class MessageService:
    """Service for message operations."""

    def __init__(self, db: Session, settings: Settings | None = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.policy = ModerationPolicy(db)

    def get_message(self, message_id: int) -> Message:
        message = self.db.get(Message, message_id)
        if message is None:
            raise NotFoundError("Message not found", error_code="MESSAGE_NOT_FOUND")
        return message

    def create_message(
        self,
        sender_user_id: int | None,
        text: str | None = None,
        image_base64: str | None = None,
        audio_base64: str | None = None,
        reply_to_message_id: int | None = None,
    ) -> Message:
        """Create a message carrying exactly one kind of content."""
        if sender_user_id is None:
            raise ValidationError("sender_user_id is required", error_code="MISSING_SENDER")

        text = text.strip() if text else None
        contents = [c for c in (text, image_base64, audio_base64) if c]
        if not contents:
            raise ValidationError(
                "One of text, image_base64 or audio_base64 is required",
                error_code="MISSING_CONTENT",
            )
        if len(contents) > 1:
            raise ValidationError(
                "Only one of text, image_base64 or audio_base64 may be set",
                error_code="MULTIPLE_CONTENT",
            )
        if text and len(text) > self.settings.message_text_max_length:
            raise ValidationError(
                f"Text must be at most {self.settings.message_text_max_length} characters"
            )

        self.policy.require_user(sender_user_id)

        message = Message(
            sender_user_id=sender_user_id,
            text=text,
            image_base64=image_base64 or None,
            audio_base64=audio_base64 or None,
        )

        if reply_to_message_id is not None:
            target = self.db.get(Message, reply_to_message_id)
            if target is not None:
                message.reply_to_message_id = target.id
                message.reply_to_sender_user_id = target.sender_user_id
                message.reply_to_text = reply_snippet(target)

        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        logger.info(f"Message {message.id} ({message.content_kind}) from user {sender_user_id}")
        return message

    def list_messages(
        self,
        requester_id: int | None = None,
        before_message_id: int | None = None,
        limit: int | None = None,
    ) -> MessagePageResult:
        """Return a page of messages visible to requester_id, oldest first.

        before_message_id is a cursor: only messages strictly older than it
        are returned. An unknown cursor yields an empty page.
        """
        limit = limit or self.settings.message_page_size
        is_admin = self.policy.sees_moderation_state(requester_id)

        stmt = select(Message).options(selectinload(Message.reactions))

        if requester_id is not None and not is_admin:
            stmt = stmt.where(self.policy.visible_messages_clause(requester_id))

        if before_message_id is not None:
            cursor = self.db.get(Message, before_message_id)
            if cursor is None:
                return MessagePageResult(messages=[], has_more=False)
            stmt = stmt.where(
                or_(
                    Message.created_at < cursor.created_at,
                    and_(Message.created_at == cursor.created_at, Message.id < cursor.id),
                )
            )

        # Newest first, one extra row to detect a further page
        stmt = stmt.order_by(Message.created_at.desc(), Message.id.desc()).limit(limit + 1)
        rows = list(self.db.scalars(stmt).all())

        has_more = len(rows) > limit
        page = rows[:limit]
        page.reverse()

        deleted_ids = None
        if is_admin:
            deleted_ids = self._hidden_message_ids([m.id for m in page])

        return MessagePageResult(messages=page, has_more=has_more, deleted_ids=deleted_ids)

    def soft_delete_for_user(self, message_id: int, requester_id: int) -> None:
        """Hide a message for the requester only. Idempotent."""
        self.get_message(message_id)
        self.policy.require_user(requester_id)

        if self._is_hidden_for(message_id, requester_id):
            return
        self.db.add(MessageHidden(message_id=message_id, user_id=requester_id))
        try:
            self.db.commit()
        except IntegrityError:
            # Hidden by a concurrent request
            self.db.rollback()

    def hide_for_everyone(self, message_id: int, requester_id: int) -> int:
        """Hide a message for every user. Admin only; the admin still sees it flagged."""
        self.get_message(message_id)
        self.policy.require_admin(requester_id, "delete messages for everyone")

        already_hidden = exists().where(
            MessageHidden.message_id == message_id,
            MessageHidden.user_id == User.id,
        )
        result = self.db.connection().execute(
            insert(MessageHidden).from_select(
                ["message_id", "user_id"],
                select(literal(message_id), User.id).where(~already_hidden),
            )
        )
        self.db.commit()
        logger.info(f"Message {message_id} hidden for everyone by admin {requester_id}")
        return result.rowcount

    def clear_all(self, requester_id: int) -> int:
        """Clear the chat.

        The admin permanently deletes every message. Anyone else hides every
        message for themselves only. Returns the number of messages affected.
        """
        self.policy.require_user(requester_id)

        if self.policy.is_admin(requester_id):
            self.db.execute(delete(MessageHidden))
            self.db.execute(delete(MessageReaction))
            result = self.db.execute(delete(Message))
            self.db.commit()
            logger.info(f"Admin {requester_id} deleted all {result.rowcount} messages")
            return result.rowcount

        result = self.db.connection().execute(
            insert(MessageHidden).from_select(
                ["message_id", "user_id"],
                select(Message.id, literal(requester_id)).where(
                    self.policy.visible_messages_clause(requester_id)
                ),
            )
        )
        self.db.commit()
        logger.info(f"User {requester_id} cleared {result.rowcount} messages from their view")
        return result.rowcount

    def toggle_reaction(self, message_id: int, user_id: int, emoji: str) -> list[MessageReaction]:
        """Add the (user, emoji) reaction, or remove it if present."""
        emoji = (emoji or "").strip()
        if not emoji:
            raise ValidationError("emoji is required", error_code="MISSING_EMOJI")

        self.get_message(message_id)
        self.policy.require_user(user_id)

        # Element-level delete/insert instead of rewriting the whole list
        removed = self.db.execute(
            delete(MessageReaction).where(
                MessageReaction.message_id == message_id,
                MessageReaction.user_id == user_id,
                MessageReaction.emoji == emoji,
            )
        )
        if removed.rowcount == 0:
            self.db.add(MessageReaction(message_id=message_id, user_id=user_id, emoji=emoji))
        try:
            self.db.commit()
        except IntegrityError:
            # Same reaction added concurrently; it is present either way
            self.db.rollback()

        return list(
            self.db.scalars(
                select(MessageReaction)
                .where(MessageReaction.message_id == message_id)
                .order_by(MessageReaction.id)
            ).all()
        )

    def mark_seen_for_user(self, user_id: int) -> int:
        """Stamp seen_at on every unseen message not sent by user_id."""
        self.policy.require_user(user_id)

        result = self.db.execute(
            update(Message)
            .where(Message.sender_user_id != user_id, Message.seen_at.is_(None))
            .values(seen_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount

    def _hidden_message_ids(self, message_ids: list[int]) -> set[int]:
        if not message_ids:
            return set()
        rows = self.db.scalars(
            select(MessageHidden.message_id)
            .where(MessageHidden.message_id.in_(message_ids))
            .distinct()
        ).all()
        return set(rows)

    def _is_hidden_for(self, message_id: int, user_id: int) -> bool:
        return bool(
            self.db.scalar(
                select(
                    exists().where(
                        MessageHidden.message_id == message_id,
                        MessageHidden.user_id == user_id,
                    )
                )
            )
        )
