"""User directory API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from yappy.api.dependencies import get_user_service
from yappy.schemas.common import SuccessResponse
from yappy.schemas.user import (
    AdminAssign,
    UserCreate,
    UserDeleteRequest,
    UserResetRequest,
    UserResponse,
)
from yappy.services.user_service import UserService, UserView

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def to_user_response(view: UserView) -> UserResponse:
    return UserResponse(
        id=view.user.id,
        name=view.user.name,
        is_admin=view.is_admin,
        created_at=view.user.created_at,
    )


@router.get("", response_model=list[UserResponse])
def list_users(
    service: Annotated[UserService, Depends(get_user_service)],
):
    """List all users, oldest first."""
    return [to_user_response(view) for view in service.list_users()]


@router.post("", response_model=UserResponse)
def create_user(
    user_data: UserCreate,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Create a user, or return the existing one with the same name."""
    return to_user_response(service.create_or_get(user_data.name))


@router.delete("", response_model=SuccessResponse)
def reset_users(
    service: Annotated[UserService, Depends(get_user_service)],
    reset_request: UserResetRequest | None = None,
):
    """Remove every user so the app starts over (admin only)."""
    requested_by = reset_request.requested_by_user_id if reset_request else None
    service.reset(requested_by)
    return SuccessResponse()


@router.put("/admin", response_model=SuccessResponse)
def set_admin(
    data: AdminAssign,
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Assign the admin role. Only the current admin may, unless nobody is admin."""
    service.set_admin(data.admin_user_id, data.requested_by_user_id)
    return SuccessResponse()


@router.delete("/{user_id}", response_model=SuccessResponse)
def delete_user(
    user_id: int,
    service: Annotated[UserService, Depends(get_user_service)],
    delete_request: UserDeleteRequest | None = None,
):
    """Delete a user (admin only)."""
    requested_by = delete_request.requested_by_user_id if delete_request else None
    service.delete_user(user_id, requested_by)
    return SuccessResponse()
