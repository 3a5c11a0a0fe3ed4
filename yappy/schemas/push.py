"""Push notification schemas."""

from pydantic import BaseModel, ConfigDict, Field


class PushKeys(BaseModel):
    """Browser-generated delivery keys."""

    p256dh: str = Field(..., max_length=200)
    auth: str = Field(..., max_length=100)


class PushSubscriptionInfo(BaseModel):
    """PushSubscription.toJSON() as sent by the browser."""

    model_config = ConfigDict(populate_by_name=True)

    endpoint: str = Field(..., min_length=1, max_length=500)
    keys: PushKeys
    expiration_time: int | None = Field(None, alias="expirationTime")


class PushSubscribeRequest(BaseModel):
    """Register or update a subscription for a user."""

    user_id: int
    subscription: PushSubscriptionInfo
    notify_user_ids: list[int] = []


class VapidPublicKeyResponse(BaseModel):
    """VAPID public key for client-side subscription."""

    public_key: str
