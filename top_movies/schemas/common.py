"""Common schemas used across the API."""

from typing import Any, Literal

from pydantic import BaseModel

ErrorCode = Literal[
    "OUT_OF_RANGE",
    "NON_NUMERIC",
    "NOT_FOUND",
    "STORAGE_UNAVAILABLE",
    "SESSION_CLOSED",
    "INTERNAL_ERROR",
]


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: ErrorCode
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail

    @classmethod
    def build(cls, code: ErrorCode, message: str, detail: dict[str, Any] | None = None) -> "ErrorResponse":
        return cls(error=ErrorDetail(code=code, message=message, detail=detail))
