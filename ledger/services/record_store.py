"""SQLAlchemy-backed record store for transactions.

The store is the only component that talks to the database. Driver errors are
rolled back and re-raised as ``TransientStoreFailure``; nothing is retried.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger.core.db import Transaction
from ledger.core.errors import TransientStoreFailure
from ledger.core.utils import get_logger
from ledger.services.filters import TransactionFilter

logger = get_logger("ledger.store")


@contextmanager
def store_errors(session: Session, operation: str) -> Iterator[None]:
    """Roll back and translate database errors raised inside the block."""
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(f"Record store failure during {operation}")
        raise TransientStoreFailure("Record store unavailable, please retry") from exc


class RecordStore:
    """Keyed, filterable and sortable storage of transaction records."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    def insert(self, record: Transaction) -> Transaction:
        """Persist a new record and return it with its id assigned."""
        with store_errors(self.session, "insert"):
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return record

    def get(self, record_id: int) -> Transaction | None:
        """Return the record with the given id, or None."""
        with store_errors(self.session, "get"):
            return self.session.get(Transaction, record_id)

    def count(self, record_filter: TransactionFilter) -> int:
        """Count the records matching the filter."""
        stmt = select(func.count()).select_from(Transaction).where(*record_filter.clauses())
        with store_errors(self.session, "count"):
            return self.session.execute(stmt).scalar_one()

    def find(
        self, record_filter: TransactionFilter, offset: int = 0, limit: int | None = None
    ) -> list[Transaction]:
        """Return matching records, newest date first and newest insertion first within a date."""
        stmt = (
            select(Transaction)
            .where(*record_filter.clauses())
            .order_by(Transaction.occurred_at.desc(), Transaction.id.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with store_errors(self.session, "find"):
            return list(self.session.scalars(stmt))

    def save(self, record: Transaction) -> Transaction:
        """Commit changes made to an existing record."""
        with store_errors(self.session, "save"):
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return record

    def delete(self, record: Transaction) -> None:
        """Remove a record permanently."""
        with store_errors(self.session, "delete"):
            self.session.delete(record)
            self.session.commit()
