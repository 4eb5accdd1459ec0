"""
SubTrack Backend: Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for every failure the API can report.
Why:   Each condition maps to its own HTTP status and its own human-readable
       message. Callers branch on the exception type (or ValidationError.kind)
       instead of parsing strings.
How:   Each exception carries a message (safe to return to clients) and an
       optional context dict (logged server-side only). Global handlers in
       main.py render them into the {"status": "Error", "error": ...} envelope.

Exception Hierarchy:
    SubTrackError (base)
    ├── ValidationError      → 400 Bad Request (carries a ValidationKind)
    ├── NotFoundError        → 404 Not Found
    ├── AlreadyExistsError   → 409 Conflict
    └── StorageError         → 500 Internal Server Error (wraps backend failures)

Design Decision:
    Error "sentinels" are exception classes plus a closed enum of validation
    kinds, not shared mutable objects. Storage translates driver-level signals
    (unique violation, no rows) into these types at its own boundary.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ValidationKind(str, Enum):
    """Closed set of input problems the API distinguishes."""

    EMPTY_REQUEST = "empty_request"
    UNDECODABLE_REQUEST = "undecodable_request"
    INVALID_ID = "invalid_id"
    EMPTY_SERVICE_NAME = "empty_service_name"
    INVALID_PRICE = "invalid_price"
    EMPTY_USER_ID = "empty_user_id"
    INVALID_USER_ID = "invalid_user_id"
    INVALID_USER_ID_FILTER = "invalid_user_id_filter"
    EMPTY_START_DATE = "empty_start_date"
    INVALID_START_DATE = "invalid_start_date"
    EMPTY_END_DATE = "empty_end_date"
    INVALID_END_DATE = "invalid_end_date"
    START_AFTER_END = "start_after_end"
    MISSING_OFFSET = "missing_offset"
    MISSING_LIMIT = "missing_limit"
    INVALID_LIMIT = "invalid_limit"
    INVALID_OFFSET = "invalid_offset"


class SubTrackError(Exception):
    """
    Base exception for all SubTrack application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged but NOT returned to the client)
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
    Raised when client input fails validation.

    HTTP: 400 Bad Request

    The message is part of the public contract (clients compare it verbatim),
    so it is always passed explicitly by the rule that failed.
    """

    def __init__(
        self,
        message: str,
        kind: ValidationKind,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["kind"] = kind.value
        super().__init__(message=message, context=ctx)
        self.kind = kind


class NotFoundError(SubTrackError):
    """
    Raised when the addressed subscription does not exist.

    HTTP: 404 Not Found

    Storage raises this for an empty SELECT and for UPDATE/DELETE that touched
    zero rows, so drivers' own "no rows" signals never reach callers.
    """

    def __init__(
        self,
        resource: str = "subscription",
        resource_id: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class AlreadyExistsError(SubTrackError):
    """
    Raised when the (service_name, user_id) pair is already taken.

    HTTP: 409 Conflict

    Only the backend's unique constraint decides this; the application never
    pre-checks for duplicates.
    """

    def __init__(
        self,
        resource: str = "subscription",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=f"{resource} already exists", context=context)


class StorageError(SubTrackError):
    """
    Raised when a storage operation fails for any other reason.

    HTTP: 500 Internal Server Error

    The message is a short per-operation summary ("failed to create subscription").
    The context keeps the operation name and the backend diagnostic for logs.
    """

    def __init__(
        self,
        message: str = "storage operation failed",
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message=message, context=ctx)
        self.operation = operation
