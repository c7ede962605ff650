"""Core package: provides settings, errors, pydantic and database models, and shared utilities."""

from .errors import (  # noqa: F401
    Forbidden,
    LedgerError,
    NotFound,
    TransientStoreFailure,
    Unauthenticated,
    ValidationError,
)
from .models import TransactionKind  # noqa: F401
from .settings import Settings, get_settings  # noqa: F401
from .utils import get_logger  # noqa: F401
