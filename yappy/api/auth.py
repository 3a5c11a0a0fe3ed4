"""Passcode gate API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from yappy.api.dependencies import get_passcode_service
from yappy.schemas.auth import PasscodeResponse, PasscodeUpdate, PasscodeVerify
from yappy.schemas.common import SuccessResponse
from yappy.services.passcode_service import PasscodeService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.get("/passcode", response_model=PasscodeResponse)
def get_passcode(
    service: Annotated[PasscodeService, Depends(get_passcode_service)],
):
    """Get the current passcode, initializing it from the environment if needed."""
    return PasscodeResponse(passcode=service.get_or_initialize())


@router.post("/passcode", response_model=SuccessResponse)
def verify_passcode(
    data: PasscodeVerify,
    service: Annotated[PasscodeService, Depends(get_passcode_service)],
):
    """Verify a passcode. Responds 401 when it does not match."""
    service.verify_or_raise(data.passcode)
    return SuccessResponse()


@router.put("/passcode", response_model=SuccessResponse)
def update_passcode(
    data: PasscodeUpdate,
    service: Annotated[PasscodeService, Depends(get_passcode_service)],
):
    """Change the passcode (admin only)."""
    service.update(data.passcode, data.user_id)
    return SuccessResponse()
