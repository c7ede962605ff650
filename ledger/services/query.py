"""Filter building and paginated listing of a user's transactions."""

import re
from collections.abc import Mapping
from datetime import date

from ledger.core.models import TransactionKind, TransactionPage, TransactionRead
from ledger.core.utils import get_logger, parse_date
from ledger.services.filters import TransactionFilter
from ledger.services.record_store import RecordStore

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")

logger = get_logger("ledger.query")


def coerce_positive(value: object, default: int, maximum: int | None = None) -> int:
    """Read a leading integer from value, falling back to default, and clamp it to [1, maximum]."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        number = value
    else:
        match = _LEADING_INT.match(str(value))
        if match is None:
            return default
        number = int(match.group(1))
    number = max(1, number)
    return number if maximum is None else min(number, maximum)


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed to show total records, page_size at a time."""
    return -(-total // page_size)


class QueryEngine:
    """Builds owner-scoped filters and performs paginated listing."""

    def __init__(
        self,
        store: RecordStore,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        """Initialize the engine with a record store and page size bounds."""
        self.store = store
        self.max_page_size = max(1, max_page_size)
        self.default_page_size = min(max(1, default_page_size), self.max_page_size)

    def build_filter(self, owner_id: str, params: Mapping[str, object]) -> TransactionFilter:
        """Build a filter from request parameters; unknown or malformed values are ignored."""
        kind = None
        raw_kind = params.get("kind") or params.get("type")
        if raw_kind:
            try:
                kind = TransactionKind(str(raw_kind).strip().lower())
            except ValueError:
                logger.warning(f"Ignoring unknown kind filter: {raw_kind!r}")

        raw_category = params.get("category")
        category = str(raw_category) if raw_category else None

        start = self._date_param(params, "startDate")
        end = self._date_param(params, "endDate")
        return TransactionFilter(owner_id=owner_id, kind=kind, category=category, start=start, end=end)

    def resolve_paging(self, page: object, limit: object) -> tuple[int, int]:
        """Coerce raw page and limit values into positive integers; limit is capped at max_page_size."""
        return (
            coerce_positive(page, DEFAULT_PAGE),
            coerce_positive(limit, self.default_page_size, self.max_page_size),
        )

    def list(self, owner_id: str, params: Mapping[str, object]) -> TransactionPage:
        """Return one page of the owner's transactions matching params."""
        record_filter = self.build_filter(owner_id, params)
        page, limit = self.resolve_paging(params.get("page"), params.get("limit"))

        total = self.store.count(record_filter)
        offset = (page - 1) * limit
        # offsets past the end never reach the store, so huge page numbers stay in range
        records = self.store.find(record_filter, offset=offset, limit=limit) if offset < total else []
        logger.debug(f"Listed {len(records)}/{total} records for owner={owner_id} page={page} limit={limit}")
        return TransactionPage(
            records=[TransactionRead.model_validate(record) for record in records],
            total=total,
            page=page,
            pages=page_count(total, limit),
        )

    @staticmethod
    def _date_param(params: Mapping[str, object], key: str) -> date | None:
        raw = params.get(key)
        if not raw:
            return None
        parsed = parse_date(raw)
        if parsed is None:
            logger.warning(f"Ignoring malformed {key}: {raw!r}")
        return parsed
