"""Shared request/response schemas."""

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Plain acknowledgement."""

    success: bool = True


class UserActionRequest(BaseModel):
    """Body carrying only the acting user's id."""

    user_id: int
