"""
Inkwell Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions, one per outcome the API reports.
Why:   Services raise meaningful errors without knowing about HTTP; the
       exception handlers registered in main.py turn each class into the
       right status code and a `{"error": ...}` body.
How:   Each exception carries a client-safe message and an optional context
       dict that is logged but never returned to the caller.

Exception Hierarchy:
    InkwellError (base)                  → 500
    ├── ValidationError                  → 400 Bad Request
    ├── AuthenticationError              → 401 Unauthorized
    ├── ForbiddenError                   → 403 Forbidden
    ├── NotFoundError                    → 404 Not Found
    ├── ConflictError                    → 409 Conflict
    ├── DatabaseError                    → 500 Internal Server Error
    └── RequestTimeoutError              → 500 Internal Server Error

Each class declares `status_code` and `code` so the handlers can stay generic.
"""

from typing import Any, Dict, Optional


class InkwellError(Exception):
    """
    Base exception for all Inkwell application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    code = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(InkwellError):
    """
    Raised when client input is missing or malformed.

    When:  Missing title/authorId on create, unknown author, malformed JSON.
    HTTP:  400 Bad Request (FastAPI's own 422 is remapped to this as well)
    """

    status_code = 400
    code = "invalid_input"

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


class AuthenticationError(InkwellError):
    """
    Raised when a session token is invalid or expired, or when an operation
    requires a session and none was presented.
    """

    status_code = 401
    code = "unauthenticated"

    def __init__(
        self,
        message: str = "A valid session is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(InkwellError):
    """
    Raised when the acting identity does not own the record it tries to change.

    Always raised before any write is attempted.
    """

    status_code = 403
    code = "forbidden"

    def __init__(
        self,
        message: str = "You are not allowed to modify this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(InkwellError):
    """
    Raised when a requested record does not exist.

    SQLAlchemy returns None for missing rows; services turn that None into
    this exception so the route layer never checks for it.
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(InkwellError):
    """
    Raised when a write would violate a uniqueness rule (duplicate email).

    Covers both the service's pre-check and the database constraint firing
    when two concurrent requests race past that pre-check.
    """

    status_code = 409
    code = "conflict"

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(InkwellError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Driver errors,
        SQL and constraint names are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RequestTimeoutError(InkwellError):
    """Raised when a request runs past REQUEST_TIMEOUT_SECONDS."""

    def __init__(
        self,
        timeout: float,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["timeout_seconds"] = timeout
        super().__init__(message="The request took too long to complete", context=ctx)
        self.timeout = timeout
