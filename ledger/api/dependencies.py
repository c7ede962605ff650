"""FastAPI dependencies for DI (settings, sessions, services, caller identity).

Routes only ever see the resolved caller id; the raw bearer credential stops
here.
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ledger.auth.service import AuthService
from ledger.core.db import get_session
from ledger.core.errors import Unauthenticated
from ledger.core.settings import Settings, get_settings
from ledger.services.record_store import RecordStore
from ledger.services.transactions import TransactionService

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(
    session: Session = Depends(get_session), settings: Settings = Depends(get_settings)
) -> AuthService:
    """Provide an AuthService bound to the request's session."""
    return AuthService(session, settings)


def get_transaction_service(
    session: Session = Depends(get_session), settings: Settings = Depends(get_settings)
) -> TransactionService:
    """Provide a TransactionService bound to the request's session."""
    return TransactionService(RecordStore(session), settings)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> str:
    """Resolve the bearer token into the caller's user id."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Not authorized, no token")
    return auth.resolve(credentials.credentials)
