"""Signed bearer tokens carrying a user id."""

from datetime import timedelta

import jwt

from ledger.core.errors import Unauthenticated
from ledger.core.settings import Settings
from ledger.core.utils import utcnow


def issue_token(user_id: str, settings: Settings) -> str:
    """Sign a token for user_id that expires after the configured number of days."""
    payload = {"id": str(user_id), "exp": utcnow() + timedelta(days=settings.jwt_expires_days)}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def read_token(token: str, settings: Settings) -> str:
    """Verify a token and return the user id it carries."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.InvalidTokenError as exc:
        raise Unauthenticated("Not authorized, token failed") from exc
    user_id = payload.get("id")
    if not isinstance(user_id, str) or not user_id:
        raise Unauthenticated("Invalid token payload")
    return user_id
