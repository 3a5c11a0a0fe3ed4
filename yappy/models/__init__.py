"""SQLAlchemy models."""

from yappy.models.config_entry import ConfigEntry
from yappy.models.message import Message, MessageHidden, MessageReaction
from yappy.models.push_subscription import PushSubscription
from yappy.models.user import User

__all__ = [
    "User",
    "ConfigEntry",
    "Message",
    "MessageHidden",
    "MessageReaction",
    "PushSubscription",
]
