"""API package: provides FastAPI dependencies and route definitions for the application."""

from .dependencies import get_current_user_id, get_transaction_service  # noqa: F401
from .routes import auth_router, health_router, transactions_router  # noqa: F401
