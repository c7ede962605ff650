"""Error taxonomy shared by the services and the HTTP layer.

Every error carries a stable ``category`` and the HTTP status it maps to, so a
single exception handler can render all of them.
"""


class LedgerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    category = "internal_error"

    def __init__(self, message: str) -> None:
        """Initialize the error with a human-readable message."""
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Missing or malformed caller input."""

    status_code = 400
    category = "validation_error"


class Unauthenticated(LedgerError):
    """No caller identity, or the bearer credential could not be resolved."""

    status_code = 401
    category = "unauthenticated"


class Forbidden(LedgerError):
    """The record exists but belongs to another user."""

    status_code = 403
    category = "forbidden"


class NotFound(LedgerError):
    """The referenced record does not exist."""

    status_code = 404
    category = "not_found"


class TransientStoreFailure(LedgerError):
    """The record store failed; the caller may retry."""

    status_code = 500
    category = "store_unavailable"
