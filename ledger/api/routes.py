"""FastAPI endpoints for the Ledger API.

This module defines the transaction routes (create, list, summary, analytics and
single-record get/update/delete), the register/login routes of the credential
collaborator, and the health check. Domain errors propagate to the exception
handlers registered on the application.
"""

from fastapi import APIRouter, Depends, Query

from ledger.api.dependencies import get_auth_service, get_current_user_id, get_transaction_service
from ledger.auth.service import AuthService
from ledger.core.models import (
    Analytics,
    AuthResponse,
    Confirmation,
    LoginRequest,
    RegisterRequest,
    Summary,
    TransactionCreate,
    TransactionPage,
    TransactionRead,
    TransactionUpdate,
)
from ledger.services.transactions import TransactionService

health_router = APIRouter()
auth_router = APIRouter(prefix="/auth", tags=["auth"])
transactions_router = APIRouter(prefix="/transactions", tags=["transactions"])

RECORD_ERRORS = {
    400: {
        "description": "Invalid id.",
        "content": {"application/json": {"example": {"error": "validation_error", "detail": "Invalid id"}}},
    },
    401: {"description": "Missing or invalid bearer token."},
    403: {
        "description": "Transaction belongs to another user.",
        "content": {"application/json": {"example": {"error": "forbidden", "detail": "Not authorized"}}},
    },
    404: {
        "description": "Transaction not found.",
        "content": {"application/json": {"example": {"error": "not_found", "detail": "Transaction not found"}}},
    },
}


@health_router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@auth_router.post("/register", status_code=201, response_model=AuthResponse, summary="Create an account")
def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)) -> AuthResponse:
    """Register a user and return a bearer token."""
    return auth.register(body.name, body.email, body.password)


@auth_router.post("/login", response_model=AuthResponse, summary="Exchange credentials for a token")
def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)) -> AuthResponse:
    """Log a user in and return a bearer token."""
    return auth.login(body.email, body.password)


@transactions_router.post(
    "",
    status_code=201,
    response_model=TransactionRead,
    summary="Record a transaction",
    description=(
        "Create an income or expense entry owned by the caller.\n\n"
        "**Body:** `title`, `amount` (>= 0) and `kind` (`income` | `expense`) are required; "
        "`category` and `date` (ISO date, defaults to today) are optional."
    ),
    responses={
        400: {"description": "Missing or malformed fields."},
        401: {"description": "Missing or invalid bearer token."},
    },
)
def create_transaction(
    payload: TransactionCreate,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionRead:
    """Create a transaction for the caller."""
    return service.create(user_id, payload)


@transactions_router.get(
    "",
    response_model=TransactionPage,
    summary="List transactions",
    description=(
        "Page through the caller's transactions, newest first.\n\n"
        "**Query parameters:** `page` (default 1), `limit` (default 20, at most 100), `kind`, `category`, "
        "`startDate`, `endDate` (inclusive ISO dates). Malformed paging values fall back to defaults "
        "and malformed filters are ignored."
    ),
)
def list_transactions(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    kind: str | None = Query(None),
    type_: str | None = Query(None, alias="type", include_in_schema=False),
    category: str | None = Query(None),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionPage:
    """List the caller's transactions with filters and pagination."""
    params = {
        "page": page,
        "limit": limit,
        "kind": kind or type_,
        "category": category,
        "startDate": start_date,
        "endDate": end_date,
    }
    return service.list(user_id, params)


@transactions_router.get(
    "/summary",
    response_model=Summary,
    summary="Monthly series, top categories and totals",
    description=(
        "Income and expense per month over the trailing six months, the ten largest categories "
        "across all records, and overall income and expense totals."
    ),
)
def get_summary(
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> Summary:
    """Return the caller's summary."""
    return service.summary(user_id)


@transactions_router.get(
    "/analytics",
    response_model=Analytics,
    summary="Month-name and expense-category breakdown",
    description=(
        "Income and expense keyed by short month name over all records (years are merged), "
        "and expense totals per category with unset categories reported as `Uncategorized`."
    ),
)
def get_analytics(
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> Analytics:
    """Return the caller's analytics."""
    return service.analytics(user_id)


@transactions_router.get(
    "/{transaction_id}",
    response_model=TransactionRead,
    summary="Get a transaction",
    responses=RECORD_ERRORS,
)
def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionRead:
    """Return one of the caller's transactions."""
    return service.get(user_id, transaction_id)


@transactions_router.put(
    "/{transaction_id}",
    response_model=TransactionRead,
    summary="Update a transaction",
    responses=RECORD_ERRORS,
)
def update_transaction(
    transaction_id: str,
    payload: TransactionUpdate,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionRead:
    """Replace the supplied fields of one of the caller's transactions."""
    return service.update(user_id, transaction_id, payload)


@transactions_router.delete(
    "/{transaction_id}",
    response_model=Confirmation,
    summary="Delete a transaction",
    responses=RECORD_ERRORS,
)
def delete_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TransactionService = Depends(get_transaction_service),
) -> Confirmation:
    """Permanently delete one of the caller's transactions."""
    return service.delete(user_id, transaction_id)
