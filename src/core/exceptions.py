"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Conflict errors (400)
    USERNAME_TAKEN = "USERNAME_TAKEN"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"

    # Upstream / server errors (500)
    IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ProfileValidationError(AppException):
    """Submitted profile fields are missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            details={"field": field} if field else None,
        )


class UsernameTakenError(AppException):
    """Another profile already owns this username.

    Reported as 400 rather than 409 to keep the status existing clients
    already handle.
    """

    def __init__(
        self, username: str, message: str = "Username is already taken."
    ) -> None:
        super().__init__(
            error_code=ErrorCode.USERNAME_TAKEN,
            message=message,
            status_code=400,
            details={"username": username},
        )


class ProfileNotFoundError(AppException):
    """Profile not found."""

    def __init__(self, profile_key: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message="Profile not found",
            status_code=404,
            details={"profile_key": profile_key},
        )


class UpstreamError(AppException):
    """A collaborator (image store or database) failed."""

    def __init__(
        self, error_code: ErrorCode, message: str, details: Any | None = None
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=500,
            details=details,
        )


class ImageUploadError(UpstreamError):
    """The image store rejected or failed an upload."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            ErrorCode.IMAGE_UPLOAD_FAILED,
            message,
            details={"field": field} if field else None,
        )


class ProfileStoreError(UpstreamError):
    """The profile database failed for a reason other than a duplicate key."""

    def __init__(self, message: str = "Profile store error") -> None:
        super().__init__(ErrorCode.DATABASE_ERROR, message)
