"""
Pydantic schemas for error responses.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error response format.

    Examples:
        400: {"error": "invalid_argument", "message": "Unknown filter key 'color'"}
        401: {"error": "unauthenticated", "message": "Authorization header required"}
        403: {"error": "permission_denied", "message": "...", "details": {...}}
        404: {"error": "not_found", "message": "Asset with ID '...' not found"}
        409: {"error": "aborted", "message": "..."}
    """

    error: str = Field(
        ...,
        description="Error kind",
        examples=["invalid_argument", "failed_precondition", "permission_denied", "not_found"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Optional additional error details",
    )
