"""Message model and its per-user child rows."""

from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from yappy.database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Message(Base):
    """A chat message or note. Exactly one content field is set."""

    __tablename__ = "messages"
    __table_args__ = (Index("idx_messages_created_id", "created_at", "id"),)

    id = Column(Integer, primary_key=True, index=True)
    # Plain id, not a foreign key: messages outlive their sender
    sender_user_id = Column(Integer, nullable=False, index=True)
    text = Column(Text, nullable=True)
    image_base64 = Column(Text, nullable=True)
    audio_base64 = Column(Text, nullable=True)
    # Python-side default keeps sub-second precision on every backend
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    seen_at = Column(DateTime(timezone=True), nullable=True)

    # Reply snapshot, captured once at creation
    reply_to_message_id = Column(Integer, nullable=True)
    reply_to_sender_user_id = Column(Integer, nullable=True)
    reply_to_text = Column(String(100), nullable=True)

    # Relationships
    hidden_for = relationship(
        "MessageHidden", back_populates="message", cascade="all, delete-orphan"
    )
    reactions = relationship(
        "MessageReaction",
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="MessageReaction.id",
    )

    @property
    def content_kind(self) -> str | None:
        if self.text:
            return "text"
        if self.image_base64:
            return "image"
        if self.audio_base64:
            return "audio"
        return None


class MessageHidden(Base):
    """Marks a message as hidden for one user (the message's deletedFor list)."""

    __tablename__ = "message_hidden"
    __table_args__ = (UniqueConstraint("message_id", "user_id", name="uq_hidden_message_user"),)

    id = Column(Integer, primary_key=True)
    message_id = Column(
        Integer, ForeignKey("messages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    message = relationship("Message", back_populates="hidden_for")


class MessageReaction(Base):
    """One (user, emoji) reaction on a message."""

    __tablename__ = "message_reactions"
    __table_args__ = (
        UniqueConstraint("message_id", "user_id", "emoji", name="uq_reaction_message_user_emoji"),
    )

    id = Column(Integer, primary_key=True)
    message_id = Column(
        Integer, ForeignKey("messages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    emoji = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    message = relationship("Message", back_populates="reactions")
