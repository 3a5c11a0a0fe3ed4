"""
Domain exceptions raised by the service layer.

Each class carries the HTTP status it maps to, so the API layer can render
every domain failure through one exception handler:

    YappyError (base)
    ├── ValidationError - missing or malformed input
    ├── NotFoundError - message or user id does not resolve
    ├── IncorrectPasscodeError - passcode check failed
    ├── PermissionDeniedError - caller lacks admin rights
    ├── CannotDeleteSoleUserError - deleting the last remaining user
    ├── NotConfiguredError - no passcode stored and no environment fallback
    └── StoreError - database unavailable or failed
"""

from typing import Any


class YappyError(Exception):
    """Base exception for all application errors."""

    status_code: int = 500
    default_error_code: str = "APPLICATION_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        self.error_code = error_code or self.default_error_code
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON body returned by the API."""
        return {"detail": self.message, "error_code": self.error_code}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ValidationError(YappyError):
    status_code = 400
    default_error_code = "VALIDATION_ERROR"


class NotFoundError(YappyError):
    status_code = 404
    default_error_code = "NOT_FOUND"


class IncorrectPasscodeError(YappyError):
    status_code = 401
    default_error_code = "INCORRECT_PASSCODE"


class PermissionDeniedError(YappyError):
    status_code = 403
    default_error_code = "PERMISSION_DENIED"


class CannotDeleteSoleUserError(YappyError):
    status_code = 400
    default_error_code = "CANNOT_DELETE_SOLE_USER"


class NotConfiguredError(YappyError):
    status_code = 500
    default_error_code = "NOT_CONFIGURED"


class StoreError(YappyError):
    status_code = 500
    default_error_code = "STORE_ERROR"
