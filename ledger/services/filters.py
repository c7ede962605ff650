"""Owner-scoped predicates over transactions."""

from dataclasses import dataclass
from datetime import date

from sqlalchemy import ColumnElement

from ledger.core.db import Transaction
from ledger.core.models import TransactionKind


@dataclass(frozen=True)
class TransactionFilter:
    """Predicate over one owner's transactions.

    Unset dimensions do not filter. ``start`` and ``end`` are both inclusive.
    """

    owner_id: str
    kind: TransactionKind | None = None
    category: str | None = None
    start: date | None = None
    end: date | None = None

    def clauses(self) -> list[ColumnElement[bool]]:
        """Render the predicate as SQLAlchemy where-clauses."""
        conditions = [Transaction.owner_id == self.owner_id]
        if self.kind is not None:
            conditions.append(Transaction.kind == self.kind.value)
        if self.category is not None:
            conditions.append(Transaction.category == self.category)
        if self.start is not None:
            conditions.append(Transaction.occurred_at >= self.start)
        if self.end is not None:
            conditions.append(Transaction.occurred_at <= self.end)
        return conditions

    def matches(self, record: Transaction) -> bool:
        """Evaluate the predicate against a record in memory."""
        if str(record.owner_id) != self.owner_id:
            return False
        if self.kind is not None and record.kind != self.kind.value:
            return False
        if self.category is not None and record.category != self.category:
            return False
        if self.start is not None and record.occurred_at < self.start:
            return False
        return not (self.end is not None and record.occurred_at > self.end)
