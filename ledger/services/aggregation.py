"""Monthly, per-category and overall roll-ups of a user's transactions.

Two families of views are kept apart on purpose:

* ``monthly_series`` / ``category_totals`` / ``totals`` back the summary: a
  trailing window bucketed by (year, month), and categories grouped by their
  literal stored value.
* ``analytics`` scans every record, buckets by month name only (so January
  of two different years lands in the same bucket), and totals expense
  categories with unset values reported as ``Uncategorized``.
"""

import calendar
from collections import defaultdict
from datetime import datetime

from ledger.core.models import (
    UNCATEGORIZED,
    Analytics,
    CategoryTotal,
    MonthAmounts,
    MonthlyBucket,
    TransactionKind,
)
from ledger.core.utils import get_logger, utcnow
from ledger.services.filters import TransactionFilter
from ledger.services.record_store import RecordStore

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

logger = get_logger("ledger.aggregation")


def window_start(now: datetime, months: int) -> datetime:
    """Midnight of the same day ``months - 1`` calendar months before now.

    The current month is the first month of the window. The day is clamped to
    the length of the target month (31 March with a 2 month window gives
    28 or 29 February).
    """
    back = max(months, 1) - 1
    year, month_index = divmod(now.year * 12 + now.month - 1 - back, 12)
    month = month_index + 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day, hour=0, minute=0, second=0, microsecond=0)


class AggregationEngine:
    """Computes derived views over one owner's records."""

    def __init__(self, store: RecordStore) -> None:
        """Initialize the engine with a record store."""
        self.store = store

    def monthly_series(
        self, owner_id: str, window_months: int = 6, now: datetime | None = None
    ) -> list[MonthlyBucket]:
        """Income and expense per (year, month) over the trailing window, oldest first."""
        start = window_start(now or utcnow(), window_months)
        records = self.store.find(TransactionFilter(owner_id=owner_id, start=start.date()))

        buckets: dict[tuple[int, int], MonthlyBucket] = {}
        for record in records:
            key = (record.occurred_at.year, record.occurred_at.month)
            bucket = buckets.get(key)
            if bucket is None:
                bucket = buckets[key] = MonthlyBucket(year=key[0], month=key[1])
            if record.kind == TransactionKind.INCOME.value:
                bucket.income += record.amount
            elif record.kind == TransactionKind.EXPENSE.value:
                bucket.expense += record.amount
        return [buckets[key] for key in sorted(buckets)]

    def category_totals(self, owner_id: str, limit: int = 10) -> list[CategoryTotal]:
        """Top categories by summed amount, all kinds and all dates.

        Unset categories form their own group. Equal totals are ordered by
        category name, with the unset group first.
        """
        totals: dict[str | None, float] = defaultdict(float)
        for record in self.store.find(TransactionFilter(owner_id=owner_id)):
            totals[record.category] += record.amount

        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0] is not None, item[0] or ""))
        return [CategoryTotal(category=category, total=total) for category, total in ranked[: max(limit, 0)]]

    def totals(self, owner_id: str) -> tuple[float, float]:
        """Overall (income, expense) sums; either is 0 when the owner has none of that kind."""
        sums: dict[str, float] = defaultdict(float)
        for record in self.store.find(TransactionFilter(owner_id=owner_id)):
            sums[record.kind] += record.amount
        return sums[TransactionKind.INCOME.value], sums[TransactionKind.EXPENSE.value]

    def analytics(self, owner_id: str) -> Analytics:
        """Month-name breakdown across all years plus expense-only category totals."""
        monthly: dict[int, MonthAmounts] = {}
        categories: dict[str, float] = defaultdict(float)
        for record in self.store.find(TransactionFilter(owner_id=owner_id)):
            amounts = monthly.setdefault(record.occurred_at.month, MonthAmounts())
            if record.kind == TransactionKind.INCOME.value:
                amounts.income += record.amount
            elif record.kind == TransactionKind.EXPENSE.value:
                amounts.expense += record.amount
                categories[record.category or UNCATEGORIZED] += record.amount

        logger.debug(f"Analytics for owner={owner_id}: {len(monthly)} months, {len(categories)} categories")
        return Analytics(
            monthly={MONTH_NAMES[month - 1]: monthly[month] for month in sorted(monthly)},
            category_totals=dict(categories),
        )
