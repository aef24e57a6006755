"""Common schemas used across the API."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "success": false, "error": str, "code": str }
    """

    success: bool = False
    error: str
    code: str | None = None
