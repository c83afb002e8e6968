"""
B.I Booster Backend — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for the error scenarios of the
       storefront, the member area and the admin console.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    BoosterError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    │   └── InvalidActionError   → 400 (unknown admin action)
    ├── AuthenticationError      → 401 Unauthorized
    ├── AccessDeniedError        → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class BoosterError(Exception):
    """
    Base exception for all B.I Booster application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BoosterError):
    """
    Raised when client input breaks a business rule.

    When:    Password confirmation mismatch, unknown package, disallowed
             file type, missing template file/URL.
    HTTP:    400 Bad Request

    Schema-level problems (missing fields, bad email syntax) are still
    reported by FastAPI as 422.
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


class InvalidActionError(ValidationError):
    """The admin verification handler received an action it does not know."""

    def __init__(self, action: Optional[str] = None):
        super().__init__(
            message="Invalid action",
            field="action",
            context={"action": action},
        )
        self.action = action


class AuthenticationError(BoosterError):
    """
    Raised when credentials or a session token are missing or wrong.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AccessDeniedError(BoosterError):
    """
    Raised when the caller is known but not allowed to proceed.

    When:    Login to an unverified or unpaid account, a lesson above the
             member's package tier, a wrong admin key.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You do not have access to this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BoosterError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that
    None into this exception so routes stay free of HTTP logic.
    HTTP:    404 Not Found
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


class ConflictError(BoosterError):
    """
    Raised when a write would duplicate an existing unique record.

    When:    Registering with an email that already has an account.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(BoosterError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BoosterError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. Query details
    and driver errors are logged server-side only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(BoosterError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

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
