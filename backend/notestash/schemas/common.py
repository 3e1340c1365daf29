"""
Shared schema pieces: the camelCase base model and the error/health/message
response shapes used by every router.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for API models.

    Python code uses snake_case attributes; JSON uses camelCase
    (`createdAt`, `newPassword`) to match the web client. Either spelling is
    accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    """Plain success marker, e.g. after a delete or password change."""
    message: str = Field(description="Human-readable success message")


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "note with ID '9f1c…' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check body: store connectivity plus global record counts."""
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected or disconnected")
    users: Optional[int] = Field(default=None, description="Registered users")
    notes: Optional[int] = Field(default=None, description="Stored notes")
    uptime_seconds: float = Field(description="Seconds since service started")
