"""Ownership check applied to every single-record operation.

Existence is decided before ownership: a missing id is always ``NOT_FOUND``
whoever asks, and an existing record owned by someone else is always
``FORBIDDEN``.
"""

from enum import Enum

from ledger.core.db import Transaction
from ledger.core.errors import Forbidden, NotFound
from ledger.core.utils import get_logger

logger = get_logger("ledger.ownership")


class Access(Enum):
    """Outcome of an ownership check."""

    AUTHORIZED = "authorized"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


def authorize(record: Transaction | None, requester_id: object) -> Access:
    """Decide whether requester_id may act on record."""
    if record is None:
        return Access.NOT_FOUND
    if str(record.owner_id) != str(requester_id):
        return Access.FORBIDDEN
    return Access.AUTHORIZED


def require_owner(record: Transaction | None, requester_id: object) -> Transaction:
    """Return record if requester_id owns it, otherwise raise NotFound or Forbidden."""
    access = authorize(record, requester_id)
    if access is Access.NOT_FOUND:
        raise NotFound("Transaction not found")
    if access is Access.FORBIDDEN:
        logger.warning(f"Denied access to transaction {record.id} for requester={requester_id}")
        raise Forbidden("Not authorized")
    return record
