"""
MedZeal Backend: Custom Exception Hierarchy
============================================

What:  Application exceptions, one per failure class the admin UI distinguishes.
How:   Each carries a user-facing `message` and a `context` dict. Global
       handlers in main.py turn them into JSON responses; context is logged,
       and only echoed back for validation errors.

Exception Hierarchy:
    MedZealError (base)
    ├── ValidationError          → 400  required field empty / bad value (nothing written)
    ├── NotFoundError            → 404  vendor or product does not exist
    ├── FetchError               → 503  read or live subscription failed (static banner)
    ├── StoreError               → 500  write failed (transient alert; no retry, no rollback)
    ├── FileStorageError         → 500  thumbnail could not be written
    ├── MailServiceError         → 500  email not sent
    │   └── CircuitBreakerOpenError    SMTP failing repeatedly, rejected fast
    └── RateLimitExceededError   → 429  too many writes from one client

None of these is fatal to the process; each is scoped to the request that raised it.
"""

from typing import Any, Dict, Optional


class MedZealError(Exception):
    """
    Base exception for all MedZeal application errors.

    Attributes:
        message:  User-facing description (safe to return in an API response)
        context:  Debug details (logged, not returned except for validation errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MedZealError):
    """
    Raised when a form payload fails a business rule.

    Pydantic handles type/shape (FastAPI's 422); this covers the rules the admin
    forms enforce: blank-after-trim names, negative quantities, non-positive
    credit cycles, missing thumbnail. Always raised before any store request.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(MedZealError):
    """
    Raised when a path that must exist reads back as null.

    The store returns None for missing nodes rather than failing; services
    convert that into this exception so routes answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FetchError(MedZealError):
    """
    Raised when a read or live subscription of a store path failed.

    HTTP 503: the page shows a static banner. There is no automatic retry;
    the next request tries again.
    """

    def __init__(
        self,
        message: str = "Failed to load data. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreError(MedZealError):
    """
    Raised when a create/update/delete against the store failed.

    The message is the alert text shown to the admin ("Failed to update payment.").
    Writes are not retried and optimistic local changes are not rolled back.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(MedZealError):
    """Could not read, write or delete a file on the storage volume."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MailServiceError(MedZealError):
    """
    Raised when the confirmation email could not be delivered.

    HTTP 500 with the send-email wire shape: {"error": "Error sending email.", "details": ...}.
    `message` becomes `details`.
    """

    def __init__(
        self,
        message: str = "Email delivery failed",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CircuitBreakerOpenError(MailServiceError):
    """
    Raised when the SMTP circuit breaker is OPEN.

    CLOSED → OPEN after cb_failure_threshold consecutive failed sends;
    OPEN → HALF_OPEN after cb_recovery_timeout seconds; one trial send then
    closes or re-opens it.
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(
            message=(
                "Mail server is temporarily unavailable due to repeated failures. "
                f"Try again in approximately {recovery_time} seconds."
            ),
            retry_after=recovery_time,
            context=ctx,
        )
        self.recovery_time = recovery_time


class RateLimitExceededError(MedZealError):
    """A client exceeded the per-IP write rate limit (HTTP 429)."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
