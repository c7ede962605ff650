"""Main entrypoint and application factory for the Ledger API.

This module initializes the FastAPI application, configures logging, creates the
database tables on startup, renders domain errors, and exposes the Scalar API
reference endpoint. It also includes the main entrypoint for running the app
with Uvicorn.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from scalar_fastapi import get_scalar_api_reference

from ledger.api.routes import auth_router, health_router, transactions_router
from ledger.core.db import get_engine, init_db
from ledger.core.errors import LedgerError, ValidationError
from ledger.core.settings import Settings, get_settings
from ledger.core.utils import LOG_FORMAT, ROOT_LOGGER, get_logger

logger = get_logger("ledger.api")


# --- Logging Setup ---
def setup_logging(settings: Settings) -> None:
    """Apply the configured level and add a plain-text file handler when a log file is set."""
    root = get_logger(ROOT_LOGGER)
    root.setLevel(settings.log_level.upper())
    if settings.log_file and not any(isinstance(h, logging.FileHandler) for h in root.handlers):
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan event handler that creates the tables and binds sessions to the engine."""
    _ = app  # Silence unused argument warning
    settings = get_settings()
    setup_logging(settings)
    engine = get_engine(settings.database_url)
    init_db(engine)
    logger.info(f"Database ready at {engine.url.render_as_string(hide_password=True)}")
    yield
    engine.dispose()


def describe_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one readable line."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Render a domain error with its category and status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse({"error": exc.category, "detail": exc.message}, status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request-body validation failures as 400 validation errors."""
    message = describe_validation_error(exc)
    logger.info(f"{request.method} {request.url.path} rejected: {message}")
    return JSONResponse({"error": ValidationError.category, "detail": message}, status_code=ValidationError.status_code)


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="Ledger API",
    description="""
    The Ledger API records per-user income and expense transactions and answers filtered,
    paginated and summarized queries over them.

    **Endpoints:**
    - `POST /auth/register`, `POST /auth/login`: Obtain a bearer token.
    - `POST /transactions`: Record a transaction.
    - `GET /transactions`: List transactions with filters and pagination.
    - `GET /transactions/summary`: Six-month series, top categories and totals.
    - `GET /transactions/analytics`: Month-name and expense-category breakdown.
    - `GET|PUT|DELETE /transactions/{id}`: Single-record operations, owner only.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version="1.0.0",
)
app.add_exception_handler(LedgerError, ledger_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(transactions_router)


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> JSONResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)


def run() -> None:
    """Run the API with Uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("ledger.main:app", host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    run()
