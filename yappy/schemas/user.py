"""User schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Create (or fetch) a user by display name."""

    name: str = Field(..., max_length=50)


class UserResponse(BaseModel):
    """User with its computed admin flag."""

    id: int
    name: str
    is_admin: bool
    created_at: datetime


class UserDeleteRequest(BaseModel):
    """User deletion request."""

    requested_by_user_id: int | None = None


class AdminAssign(BaseModel):
    """Admin reassignment request."""

    admin_user_id: int
    requested_by_user_id: int | None = None


class UserResetRequest(BaseModel):
    """Remove every user; only honoured for the admin."""

    requested_by_user_id: int | None = None
