"""Pydantic schemas for API requests/responses."""

from qrtrack.schemas.common import ErrorResponse, MessageResponse

__all__ = [
    "ErrorResponse",
    "MessageResponse",
]
