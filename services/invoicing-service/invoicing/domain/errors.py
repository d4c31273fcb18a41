"""Error taxonomy raised by the domain and persistence layers."""

from __future__ import annotations


class InvoicingError(Exception):
    """Base class for failures surfaced to API callers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(InvoicingError):
    """Request data is missing or malformed."""


class ConflictError(InvoicingError):
    """A uniqueness rule (email, company per owner) would be violated."""


class AuthError(InvoicingError):
    """Credentials or session token were rejected."""


class NotFoundError(InvoicingError):
    """Record does not exist or belongs to another account."""


class StorageError(InvoicingError):
    """The backing store could not persist a collection."""
