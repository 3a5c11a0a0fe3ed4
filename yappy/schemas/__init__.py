"""Pydantic schemas for API requests and responses."""

from yappy.schemas.auth import PasscodeResponse, PasscodeUpdate, PasscodeVerify
from yappy.schemas.common import SuccessResponse, UserActionRequest
from yappy.schemas.message import (
    MarkSeenResponse,
    MessageCreate,
    MessageDeleteRequest,
    MessagePage,
    MessageResponse,
    ReactionResponse,
    ReactionToggle,
    ReactionToggleResponse,
)
from yappy.schemas.push import PushSubscribeRequest, VapidPublicKeyResponse
from yappy.schemas.user import (
    AdminAssign,
    UserCreate,
    UserDeleteRequest,
    UserResetRequest,
    UserResponse,
)

__all__ = [
    "PasscodeResponse",
    "PasscodeUpdate",
    "PasscodeVerify",
    "SuccessResponse",
    "UserActionRequest",
    "MessageCreate",
    "MessageDeleteRequest",
    "MessagePage",
    "MessageResponse",
    "ReactionResponse",
    "ReactionToggle",
    "ReactionToggleResponse",
    "MarkSeenResponse",
    "PushSubscribeRequest",
    "VapidPublicKeyResponse",
    "UserCreate",
    "UserResponse",
    "UserDeleteRequest",
    "UserResetRequest",
    "AdminAssign",
]
