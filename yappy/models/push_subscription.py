"""Push subscription model for web push notifications."""

from sqlalchemy import JSON, BigInteger, Column, ForeignKey, Integer, String

from yappy.database import Base
from yappy.models.mixins import TimestampMixin


class PushSubscription(Base, TimestampMixin):
    """Stores web push subscriptions, keyed by endpoint."""

    __tablename__ = "push_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    endpoint = Column(String(500), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    p256dh_key = Column(String(200), nullable=False)
    auth_key = Column(String(100), nullable=False)
    # Milliseconds since epoch, as reported by the browser
    expiration_time = Column(BigInteger, nullable=True)
    # Sender user ids this subscriber wants a push for: [1, 2]
    notify_user_ids = Column(JSON, nullable=False, default=list)

    def wants_pushes_from(self, sender_user_id: int) -> bool:
        return sender_user_id in (self.notify_user_ids or [])
