"""Common DTOs for API responses and error handling."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response model."""
    detail: str = Field(..., description="Error message describing what went wrong")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Health status", example="ok")
    timestamp: datetime = Field(..., description="Server time of the check")


class RootResponse(BaseModel):
    """Root endpoint response model."""
    status: str = Field(..., description="API status", example="ok")
    service: str = Field(..., description="Service name", example="imgcache-backend")
    version: str = Field(..., description="API version", example="0.1.0")


class CurrentUserResponse(BaseModel):
    """Identity of the authenticated caller."""
    user_id: str = Field(..., description="Identifier of the authenticated caller")
    email: str | None = Field(None, description="Email address, when the auth backend provides one")
