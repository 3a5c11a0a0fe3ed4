"""Passcode schemas."""

from pydantic import BaseModel, Field


class PasscodeResponse(BaseModel):
    """Current passcode, for admin tooling."""

    passcode: str


class PasscodeVerify(BaseModel):
    """Passcode verification request."""

    passcode: str = Field(..., max_length=64)
    user_id: int | None = None


class PasscodeUpdate(BaseModel):
    """Passcode change request; only honoured for the admin."""

    passcode: str = Field(..., min_length=1, max_length=64)
    user_id: int
