"""
MedZeal Backend: Shared API Schemas
====================================

What:  Error envelope, health report and plain acknowledgement responses.
Why:   Every route documents the same error shape in OpenAPI.
"""

from typing import Dict, Optional, Union

from pydantic import BaseModel, Field

# Store numbers are JSON numbers; keep ints as ints in responses
Number = Union[int, float]


class ErrorResponse(BaseModel):
    """
    What:  Standard error body for all routes except POST /api/send-email.

    Example:
        {
            "error": "validation_error",
            "message": "Please enter both product name and price.",
            "details": {"field": "name"},
            "request_id": "3f9c1a2b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Acknowledgement for writes that return nothing else."""
    message: str
    id: Optional[str] = Field(default=None, description="Key of the created/affected node")


class HealthResponse(BaseModel):
    """
    What:  GET /health body.

    status: healthy (store reachable, subscriptions fine), degraded (a subscription
    errored or the mail circuit is open), unhealthy (store unreachable).
    """
    status: str = Field(description="healthy, degraded or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    mail: str = Field(description="closed, open or half_open (SMTP circuit breaker)")
    subscriptions: Dict[str, str] = Field(description="Live snapshot state per store path")
    uptime_seconds: float
