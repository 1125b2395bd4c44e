"""
SubTrack Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the different failure classes.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) translate
       them into structured JSON error responses.
Who:   Raised by services and auth dependencies; caught by global handlers.

Exception Hierarchy:
    SubTrackError (base)
    ├── ValidationError       → 400 Bad Request (user can correct the form)
    ├── AuthenticationError   → 401 Unauthorized
    ├── NotFoundError         → 404 Not Found
    └── DatabaseError         → 500 Internal Server Error (transient, no retry)
"""

from typing import Any, Dict, Optional


class SubTrackError(Exception):
    """
    Base exception for all SubTrack application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for validation)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SubTrackError):
    """
    Raised when submitted form data fails a business rule.

    When:    Non-numeric or non-positive amount, empty name, missing start
             date, unknown frequency or category, fewer than 2 participants.
    HTTP:    400 Bad Request

    Raised before any database call, so a rejected submission never
    mutates the store.

    Example response:
        {
            "error": "validation_error",
            "message": "Please enter a valid amount",
            "details": {"field": "amount"}
        }
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


class AuthenticationError(SubTrackError):
    """
    Raised when the request carries no usable access token.

    When:    Missing Authorization header, bad signature, expired token,
             wrong audience, or a `sub` claim that is not a UUID.
    HTTP:    401 Unauthorized (with `WWW-Authenticate: Bearer`)
    """

    def __init__(
        self,
        message: str = "Please sign in to continue",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SubTrackError):
    """
    Raised when a requested resource does not exist for the current user.

    When:    GET/PUT/DELETE /api/subscriptions/{id} with an unknown id, or an
             id owned by someone else (ownership filtering makes the two
             indistinguishable).
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


class DatabaseError(SubTrackError):
    """
    Raised when a database operation fails unexpectedly.

    When:    Connection lost, constraint violation, timeout.
    HTTP:    500 Internal Server Error

    The client only ever sees the generic message; the underlying error type
    and identifiers go to the server log. Nothing retries automatically.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
