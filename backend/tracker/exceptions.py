"""
Behavior Tracker Backend: Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions for the error classes the API reports.
How:   Each exception carries a client-safe message, an HTTP status and an
       optional context dict. Global handlers registered in main.py turn
       them into `{success: false, ...}` JSON envelopes.

Exception Hierarchy:
    TrackerError (base)                    → 500
    ├── ValidationError                    → 400 (field-level error list)
    ├── DomainError                        → 400
    │   ├── InvalidIdError
    │   ├── InvalidEmailError
    │   └── EmptyHashError
    ├── AuthenticationError                → 401
    ├── NotFoundError                      → 404
    ├── ConflictError                      → 409
    └── DatabaseError                      → 500 (store failures)
"""

from typing import Any, Dict, List, Optional


class TrackerError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:      User-facing error description (safe to return)
        context:      Additional debug info (logged, not returned)
        status_code:  HTTP status the global handler responds with
        error_code:   Machine-readable code placed in the `error` field
    """

    status_code = 500
    error_code = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TrackerError):
    """
    Raised when request input fails schema validation.

    `errors` is the structured `[{field, message, code}]` list produced by
    the validation engine; it is returned to the client verbatim.
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.errors = errors or []


class DomainError(TrackerError):
    """An entity invariant was violated at construction or mutation time."""

    status_code = 400
    error_code = "invalid_entity"


class InvalidIdError(DomainError):
    error_code = "invalid_id"

    def __init__(self, value: Any = None):
        super().__init__(
            message="ID must be a valid UUID v4",
            context={"value": repr(value)},
        )


class InvalidEmailError(DomainError):
    error_code = "invalid_email"

    def __init__(self, value: Any = None):
        super().__init__(message="Invalid email format", context={"value": repr(value)})


class EmptyHashError(DomainError):
    error_code = "empty_password_hash"

    def __init__(self):
        super().__init__(message="Password hash cannot be empty")


class AuthenticationError(TrackerError):
    """Missing, expired or invalid credentials."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(TrackerError):
    """
    Raised when a requested row does not exist.

    The store returns an empty result for missing rows; routes convert that
    into this exception so the handler can answer 404.
    """

    status_code = 404
    error_code = "not_found"

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
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(TrackerError):
    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TrackerError):
    """
    Raised when the external store fails (connectivity, constraint violation).

    The client-facing message is generic. The driver's message travels in
    `context["detail"]` and is only attached to responses outside production.
    """

    status_code = 500
    error_code = "database_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
