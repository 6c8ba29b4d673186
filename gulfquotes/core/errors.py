"""Typed application errors and the response envelope.

Services raise ``AppError`` subclasses. The exception handlers registered
in ``gulfquotes.main`` render them as::

    {"error": {"code": "...", "message": "...", "details": ...}}

with the error's HTTP status. Successful responses use ``{"data": ...}``.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from cassandra import DriverException
from cassandra.cluster import NoHostAvailable
from fastapi import status

from gulfquotes.core.logging import get_logger


logger = get_logger(__name__)


# ==============================================================================
# Error codes
# ==============================================================================

UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
NOT_FOUND = "NOT_FOUND"
BAD_REQUEST = "BAD_REQUEST"
VALIDATION_ERROR = "VALIDATION_ERROR"
DUPLICATE_SLUG = "DUPLICATE_SLUG"
CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
CONCURRENT_DELETE = "CONCURRENT_DELETE"
CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
INVALID_REFERENCE = "INVALID_REFERENCE"
DATABASE_ERROR = "DATABASE_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"

# Used for HTTPExceptions raised by the framework itself (405, 404 route...)
STATUS_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: BAD_REQUEST,
    status.HTTP_401_UNAUTHORIZED: UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: FORBIDDEN,
    status.HTTP_404_NOT_FOUND: NOT_FOUND,
    status.HTTP_409_CONFLICT: CONCURRENT_MODIFICATION,
}


# ==============================================================================
# Exceptions
# ==============================================================================


class AppError(Exception):
    """Base application error carrying a client-facing code and HTTP status."""

    code: str = INTERNAL_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error


class UnauthorizedError(AppError):
    code = UNAUTHORIZED
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ForbiddenError(AppError):
    code = FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Permission denied"


class NotFoundError(AppError):
    code = NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class BadRequestError(AppError):
    code = BAD_REQUEST
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class ValidationFailedError(AppError):
    code = VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input data"


class DuplicateSlugError(AppError):
    code = DUPLICATE_SLUG
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Quote with similar content already exists"


class ConcurrentModificationError(AppError):
    code = CONCURRENT_MODIFICATION
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource was modified by another user"


class ConcurrentDeleteError(AppError):
    code = CONCURRENT_DELETE
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource was deleted"


class CategoryNotFoundError(AppError):
    code = CATEGORY_NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Category not found"


class InvalidReferenceError(AppError):
    code = INVALID_REFERENCE
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid reference"


class DatabaseError(AppError):
    code = DATABASE_ERROR
    default_message = "Database error occurred"


class InternalError(AppError):
    code = INTERNAL_ERROR


class ServiceUnavailableError(AppError):
    """A backing service was not initialized at startup."""

    code = INTERNAL_ERROR
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service not available"


# ==============================================================================
# Helpers
# ==============================================================================


@contextmanager
def translate_errors(context: str, message: str) -> Iterator[None]:
    """Translate unexpected exceptions raised in the block into AppErrors.

    ``AppError`` passes through untouched. Driver failures become
    ``DatabaseError`` and anything else becomes ``InternalError`` carrying
    ``message``. The original exception is logged under ``context`` first.

    Usage:
        with translate_errors("notification_create_failed", "Failed to create notification"):
            await self.session.aexecute(...)
    """
    try:
        yield
    except AppError:
        raise
    except (DriverException, NoHostAvailable) as e:
        logger.exception(context, error=str(e), error_type=type(e).__name__)
        raise DatabaseError() from e
    except Exception as e:
        logger.exception(context, error=str(e), error_type=type(e).__name__)
        raise InternalError(message) from e


def envelope(data: Any) -> dict[str, Any]:
    """Wrap a successful payload."""
    return {"data": data}


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Build an error envelope."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"error": error}
