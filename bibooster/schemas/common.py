"""
B.I Booster Backend — Shared Response Schemas
===============================================

Error and health payloads used across every router.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Passwords do not match",
            "details": {"field": "confirm_password"},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class ActionErrorResponse(BaseModel):
    """Error body of the admin verification handler: {"error": "..."}."""

    error: str = Field(description="Error message")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Storage volume: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
