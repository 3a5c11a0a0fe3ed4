"""Message schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    """Create a message. Exactly one of text, image_base64 or audio_base64."""

    sender_user_id: int | None = None
    text: str | None = None
    image_base64: str | None = None
    audio_base64: str | None = None
    reply_to_message_id: int | None = None


class ReactionResponse(BaseModel):
    """A single (user, emoji) reaction."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    emoji: str


class MessageResponse(BaseModel):
    """Message as delivered to a client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_user_id: int
    text: str | None
    image_base64: str | None
    audio_base64: str | None
    created_at: datetime
    seen_at: datetime | None
    reply_to_message_id: int | None = None
    reply_to_sender_user_id: int | None = None
    reply_to_text: str | None = None
    reactions: list[ReactionResponse] = []
    # Only populated for admin viewers
    is_deleted: bool | None = None


class MessagePage(BaseModel):
    """One page of messages, oldest first."""

    messages: list[MessageResponse]
    has_more: bool


class MessageDeleteRequest(BaseModel):
    """Hide one message for the requester, or for everyone (admin only)."""

    user_id: int
    for_everyone: bool = False


class ReactionToggle(BaseModel):
    """Toggle a reaction."""

    user_id: int
    emoji: str = Field(..., min_length=1, max_length=32)


class ReactionToggleResponse(BaseModel):
    """Reactions after a toggle."""

    success: bool = True
    reactions: list[ReactionResponse]


class MarkSeenResponse(BaseModel):
    """Result of a seen-marking sweep."""

    success: bool = True
    marked_count: int
