"""Application errors.

Every error the share endpoints can answer with is a ``SharingError``
subclass carrying its HTTP status and machine-readable code. The global
handler in ``app.main`` turns them into the response envelope::

    {"success": false, "error": {"code": "SHARE_NOT_FOUND", "message": "..."}}
"""

from typing import Any


class SharingError(Exception):
    """Base class for errors returned to API clients."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": {"code": self.code, "message": self.message},
        }


class MissingFieldsError(SharingError):
    status_code = 400
    code = "MISSING_FIELDS"
    default_message = "mediaId and toUserId are required"


class InvalidShareError(SharingError):
    status_code = 400
    code = "INVALID_SHARE"
    default_message = "Cannot share with yourself"


class InvalidIdError(SharingError):
    status_code = 400
    code = "INVALID_ID"
    default_message = "Invalid share ID format"


class InvalidStatusError(SharingError):
    status_code = 400
    code = "INVALID_STATUS"
    default_message = "Status must be one of: watched, archived"


class ShareValidationError(SharingError):
    """Raised by the store when a field violates its constraints."""

    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input data"


class AuthenticationRequiredError(SharingError):
    status_code = 401
    code = "AUTHENTICATION_REQUIRED"
    default_message = "Authentication required. Please log in."


class ForbiddenError(SharingError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "You don't have permission to access this share"


class ShareNotFoundError(SharingError):
    status_code = 404
    code = "SHARE_NOT_FOUND"
    default_message = "Share not found"
