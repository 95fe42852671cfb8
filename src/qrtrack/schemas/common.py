"""Common schemas used across the API."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Standard response carrying only a message."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    message: str
    error: str | list | None = None
