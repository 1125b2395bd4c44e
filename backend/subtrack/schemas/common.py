"""
SubTrack Backend — Shared Response Schemas
===========================================

What:  Error envelope, health check, and account payloads used across routes.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Please enter a valid amount",
            "details": {"field": "amount"},
            "request_id": "3f2a9c1d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    auth: str = Field(description="Token verification: configured, missing_secret")
    uptime_seconds: float = Field(description="Seconds since service started")


class AccountResponse(BaseModel):
    """Account information of the signed-in user (settings screen)."""
    id: uuid.UUID
    email: Optional[str] = None
