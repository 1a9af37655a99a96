"""
Domain exceptions for the booking core.

Business-rule failures (validation, date conflicts, missing or locked
bookings) are deterministic: retrying the same request gives the same
answer. Infrastructure failures carry ``retryable=True`` so clients can
tell the two apart.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DATES_UNAVAILABLE = "DATES_UNAVAILABLE"
    NOT_FOUND_OR_ILLEGAL_STATE = "NOT_FOUND_OR_ILLEGAL_STATE"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"


class BookingServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400
    code: ErrorCode = ErrorCode.VALIDATION_ERROR
    retryable: bool = False

    def __init__(self, detail: str, *, retryable: Optional[bool] = None):
        super().__init__(detail)
        self.detail = detail
        if retryable is not None:
            self.retryable = retryable

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.detail,
            "code": self.code.value,
            "retryable": self.retryable,
        }


class BookingValidationError(BookingServiceError):
    """Malformed request: bad interval, occupancy, or unsupported stay type."""

    status_code = 422
    code = ErrorCode.VALIDATION_ERROR


class DatesUnavailableError(BookingServiceError):
    """Requested interval overlaps an active booking for the hotel."""

    status_code = 409
    code = ErrorCode.DATES_UNAVAILABLE


class NotFoundOrIllegalStateError(BookingServiceError):
    status_code = 404
    code = ErrorCode.NOT_FOUND_OR_ILLEGAL_STATE


class PermissionDeniedError(BookingServiceError):
    status_code = 403
    code = ErrorCode.PERMISSION_DENIED


class DependencyFailureError(BookingServiceError):
    """A collaborator (database, payment, storage) is unavailable."""

    status_code = 503
    code = ErrorCode.DEPENDENCY_FAILURE
    retryable = True
