"""
NoteStash Backend: Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for every failure the data-access layer
       and its HTTP façade can report.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers in main.py translate them into JSON responses;
       the context is logged but never returned verbatim for server errors.
Who:   Raised by the store and the services; caught by the global handlers.

Exception Hierarchy:
    NoteStashError (base)
    ├── ValidationError              → 400 Bad Request
    ├── AuthenticationRequiredError  → 401 Unauthorized (no identity supplied)
    ├── InvalidCredentialsError      → 401 Unauthorized (login failed)
    ├── PermissionDeniedError        → 403 Forbidden (actor is not the owner)
    ├── NotFoundError                → 404 Not Found
    ├── AlreadyExistsError           → 409 Conflict
    ├── StoreUnavailableError        → 503 Service Unavailable (retry later)
    └── DatabaseError                → 500 Internal Server Error

Every failure is scoped to the single request that raised it; none of these
are fatal to the process.
"""

from typing import Any, Dict, Optional


class NoteStashError(Exception):
    """
    Base exception for all NoteStash application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteStashError):
    """
    Raised when input fails a business rule that schema validation cannot
    express (for example a blank title in a partial update).

    HTTP: 400 Bad Request
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


class AuthenticationRequiredError(NoteStashError):
    """Raised when a request needs a caller identity and none was supplied."""

    def __init__(
        self,
        message: str = "Authentication required. Supply the X-User-Email header.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidCredentialsError(NoteStashError):
    """
    Raised when login fails.

    Unknown email and wrong password deliberately produce the same error so
    the response does not reveal which accounts exist.
    """

    def __init__(
        self,
        message: str = "Invalid email or password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(NoteStashError):
    """
    Raised when the acting user is not the owner of the note being mutated.

    HTTP: 403 Forbidden
    """

    def __init__(
        self,
        message: str = "You do not have permission to modify this note",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NoteStashError):
    """
    Raised when a referenced user or note does not exist.

    The store returns None for missing keys; services convert that into this
    exception where the operation requires the record to exist.

    HTTP: 404 Not Found
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


class AlreadyExistsError(NoteStashError):
    """
    Raised when a conditional write finds its key already taken.

    When:  Registering an email that is already indexed, or (vanishingly
           unlikely) generating a user identifier that already exists.
    HTTP:  409 Conflict
    """

    def __init__(
        self,
        resource: str = "resource",
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(message=message or f"{resource} already exists", context=ctx)


class StoreUnavailableError(NoteStashError):
    """
    Raised when the keyed store keeps failing with transient errors after the
    retry budget is spent.

    HTTP: 503 Service Unavailable, with a Retry-After hint.
    """

    def __init__(
        self,
        message: str = "The note store is temporarily unavailable. Please try again shortly.",
        retry_after: int = 5,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(NoteStashError):
    """
    Raised when a store operation fails for a non-transient reason.

    The message returned to the client is always generic; the original error
    type is kept in the context for server-side logs.

    HTTP: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
