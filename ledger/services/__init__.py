"""Services package: record store, query and aggregation engines, ownership guard and the transaction service."""

from .aggregation import AggregationEngine  # noqa: F401
from .ownership import Access, authorize, require_owner  # noqa: F401
from .query import QueryEngine  # noqa: F401
from .record_store import RecordStore  # noqa: F401
from .transactions import TransactionService  # noqa: F401
