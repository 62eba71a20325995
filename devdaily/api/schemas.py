"""API schemas.

Pydantic models for the JSON envelope and the handful of typed request
bodies the API accepts.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


# ============================================================================
# Envelope
# ============================================================================


class ApiResponse(BaseModel):
    """Standard success envelope."""

    status: Literal["success", "error"] = "success"
    message: str = Field(default="Success", description="Human readable outcome")
    data: Any = Field(default=None, description="Payload")
    meta: dict[str, Any] | None = Field(default=None, description="Pagination and other metadata")


class ErrorResponse(BaseModel):
    """Standard error envelope.

    All API errors follow this format for consistency.
    """

    status: Literal["error"] = "error"
    message: str = Field(..., description="Human readable error message")
    errors: dict[str, Any] = Field(default_factory=dict, description="Field errors or extra details")
    error_code: str = Field(..., description="Machine readable error code")
    request_id: str | None = Field(default=None, description="Request correlation ID")


# ============================================================================
# Requests
# ============================================================================


class LoginBody(BaseModel):
    """Login credentials; ``identifier`` may be a username or an email."""

    identifier: str | None = None
    username: str | None = None
    email: str | None = None
    password: str | None = None
    remember_me: bool = False


# ============================================================================
# Health
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str
