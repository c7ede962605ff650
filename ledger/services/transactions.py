"""TransactionService: the seven operations on a user's ledger.

Every operation receives the caller's already-resolved identity. Single-record
operations go through the ownership guard; listing and summaries are scoped to
the caller by construction.
"""

import re
from collections.abc import Mapping

from ledger.core.db import Transaction
from ledger.core.errors import Unauthenticated, ValidationError
from ledger.core.models import (
    Analytics,
    Confirmation,
    Summary,
    TransactionCreate,
    TransactionKind,
    TransactionPage,
    TransactionRead,
    TransactionUpdate,
)
from ledger.core.settings import Settings, get_settings
from ledger.core.utils import get_logger, utcnow
from ledger.services.aggregation import AggregationEngine
from ledger.services.ownership import require_owner
from ledger.services.query import QueryEngine
from ledger.services.record_store import RecordStore

logger = get_logger("ledger.service")

# store keys are signed 64-bit integers
MAX_RECORD_ID = 2**63 - 1


def parse_record_id(record_id: object) -> int:
    """Turn a path id into a store key, rejecting anything that is not a positive integer."""
    if isinstance(record_id, int) and not isinstance(record_id, bool):
        value = record_id
    elif isinstance(record_id, str) and re.fullmatch(r"[0-9]+", record_id.strip()):
        value = int(record_id.strip())
    else:
        raise ValidationError("Invalid id")
    if value <= 0 or value > MAX_RECORD_ID:
        raise ValidationError("Invalid id")
    return value


def normalize_owner(owner_id: object) -> str:
    """Return the caller identity as a non-empty string."""
    owner = "" if owner_id is None else str(owner_id).strip()
    if not owner:
        raise Unauthenticated("Missing caller identity")
    return owner


class TransactionService:
    """Orchestrates the record store, query engine, ownership guard and aggregations."""

    def __init__(
        self,
        store: RecordStore,
        settings: Settings | None = None,
        query_engine: QueryEngine | None = None,
        aggregation_engine: AggregationEngine | None = None,
    ) -> None:
        """Initialize the service; engines default to ones built on the same store."""
        self.store = store
        self.settings = settings or get_settings()
        self.query_engine = query_engine or QueryEngine(
            store, self.settings.default_page_size, self.settings.max_page_size
        )
        self.aggregation_engine = aggregation_engine or AggregationEngine(store)

    def create(self, owner_id: object, payload: TransactionCreate) -> TransactionRead:
        """Record a new transaction owned by the caller."""
        owner = normalize_owner(owner_id)
        now = utcnow()
        record = Transaction(
            owner_id=owner,
            title=payload.title,
            amount=payload.amount,
            kind=payload.kind.value,
            category=payload.category,
            occurred_at=payload.occurred_at or now.date(),
            created_at=now,
            updated_at=now,
        )
        saved = self.store.insert(record)
        logger.info(f"Created transaction {saved.id} for owner={owner}")
        return TransactionRead.model_validate(saved)

    def list(self, owner_id: object, params: Mapping[str, object]) -> TransactionPage:
        """Return one filtered page of the caller's transactions."""
        return self.query_engine.list(normalize_owner(owner_id), params)

    def get(self, owner_id: object, record_id: object) -> TransactionRead:
        """Return one of the caller's transactions."""
        return TransactionRead.model_validate(self._owned(owner_id, record_id))

    def update(self, owner_id: object, record_id: object, payload: TransactionUpdate) -> TransactionRead:
        """Replace the supplied fields of one of the caller's transactions."""
        record = self._owned(owner_id, record_id)
        changes = payload.changes()
        for name, value in changes.items():
            setattr(record, name, value.value if isinstance(value, TransactionKind) else value)
        record.updated_at = utcnow()
        saved = self.store.save(record)
        logger.info(f"Updated transaction {saved.id} fields={sorted(changes)}")
        return TransactionRead.model_validate(saved)

    def delete(self, owner_id: object, record_id: object) -> Confirmation:
        """Permanently remove one of the caller's transactions."""
        record = self._owned(owner_id, record_id)
        self.store.delete(record)
        logger.info(f"Deleted transaction {record.id} for owner={record.owner_id}")
        return Confirmation(message="Transaction deleted")

    def summary(self, owner_id: object) -> Summary:
        """Trailing monthly series, top categories and overall totals."""
        owner = normalize_owner(owner_id)
        engine = self.aggregation_engine
        total_income, total_expense = engine.totals(owner)
        return Summary(
            monthly=engine.monthly_series(owner, self.settings.summary_window_months),
            category=engine.category_totals(owner, self.settings.summary_category_limit),
            total_income=total_income,
            total_expense=total_expense,
        )

    def analytics(self, owner_id: object) -> Analytics:
        """Month-name and expense-category breakdown over all records."""
        return self.aggregation_engine.analytics(normalize_owner(owner_id))

    def _owned(self, owner_id: object, record_id: object) -> Transaction:
        owner = normalize_owner(owner_id)
        key = parse_record_id(record_id)
        return require_owner(self.store.get(key), owner)
