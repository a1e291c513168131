"""
Postboard Backend — Shared Response Schemas
=============================================

What:  Error envelope, health payload and the field-message helper shared by
       every router and request schema.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

# (field, pydantic error type) -> message shown to the client
FieldMessages = Dict[Tuple[str, str], str]

# Error types that mean "no usable value was sent"
BLANK_ERRORS = ("missing", "string_type", "string_too_short")


def messages_for(field: str, message: str, error_types: Tuple[str, ...] = BLANK_ERRORS) -> FieldMessages:
    """Maps each of `error_types` on `field` to `message`."""
    return {(field, error_type): message for error_type in error_types}


class FieldError(BaseModel):
    """One broken rule on one request field."""
    field: str = Field(description="Name of the offending field")
    message: str = Field(description="Human-readable rule description")
    location: str = Field(default="body", description="Where the field lives: body, path, header")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [{"field": "text", "message": "Text is required", "location": "body"}],
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[FieldError]] = Field(default=None, description="Field-level violations")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    msg: str


class HealthResponse(BaseModel):
    """Returned by GET /health for container and load balancer probes."""
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the process started")
