"""Application error hierarchy.

Every error carries the HTTP status it maps to and a human readable message.
The optional ``detail`` holds the underlying cause and is only exposed to
clients when debug mode is enabled.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors rendered as JSON responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    """Bad credentials or a missing/invalid/expired session."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AppError):
    """Authenticated, but not allowed to act on the resource."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    """Referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Duplicate record or a concurrent modification."""

    status_code = status.HTTP_409_CONFLICT


class UpstreamError(AppError):
    """A dependency (store, mail, inference) failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
