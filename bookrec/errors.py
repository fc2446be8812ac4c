"""Error taxonomy for lending engine operations.

Every failure carries an enumerated ``reason`` (also its ``str()``) plus a
``context`` dict so callers branch on structure rather than message text.
Store faults are chained with ``raise ... from exc`` and their original text
is preserved under ``context["detail"]``.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorReason(str, Enum):
    ADMIN_REQUIRED = "admin_required"
    EMPTY_USERNAME = "empty_username"
    UNKNOWN_STUDENT = "unknown_student"
    UNKNOWN_BOOK = "unknown_book"
    UNKNOWN_ISSUE = "unknown_issue"
    NO_COPIES_AVAILABLE = "no_copies_available"
    ALREADY_ISSUED = "already_issued"
    ALREADY_RETURNED = "already_returned"
    MISSING_BOOK_FIELDS = "missing_book_fields"
    INVALID_PUBLICATION_YEAR = "invalid_publication_year"
    INVALID_TOTAL_COPIES = "invalid_total_copies"
    MISSING_REGISTRATION_FIELDS = "missing_registration_fields"
    INVALID_EMAIL = "invalid_email"
    USERNAME_TAKEN = "username_taken"
    EMAIL_TAKEN = "email_taken"
    TRANSACTION_FAILED = "transaction_failed"
    STORE_UNAVAILABLE = "store_unavailable"


class LibraryError(Exception):
    """Base class for every reported engine failure."""

    def __init__(self, reason: ErrorReason, **context: Any) -> None:
        super().__init__(reason.value)
        self.reason = reason
        self.context: Dict[str, Any] = context

    @property
    def detail(self) -> Optional[str]:
        return self.context.get("detail")

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.reason.value}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class ValidationError(LibraryError, ValueError):
    """Bad or missing input; raised before the store is touched."""


class NotFoundError(LibraryError):
    """Unknown user, book or issue (reported after a read)."""


class ConflictError(LibraryError):
    """State conflict such as a duplicate active issue or taken username."""


class TransactionFailedError(LibraryError):
    """A write unit failed and was rolled back."""


class StoreUnavailableError(LibraryError):
    """The store could not be reached; not retried internally."""


class PermissionDeniedError(LibraryError):
    """The acting identity may not perform the operation."""


__all__ = [
    "ErrorReason",
    "LibraryError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "TransactionFailedError",
    "StoreUnavailableError",
    "PermissionDeniedError",
]
