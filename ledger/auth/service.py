"""Registration, login and bearer-token resolution.

The ledger core never sees credentials; it only receives the string id that
``AuthService.resolve`` returns.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger.auth.passwords import hash_password, verify_password
from ledger.auth.tokens import issue_token, read_token
from ledger.core.db import User
from ledger.core.errors import Unauthenticated, ValidationError
from ledger.core.models import AuthResponse
from ledger.core.settings import Settings
from ledger.core.utils import get_logger
from ledger.services.record_store import store_errors

logger = get_logger("ledger.auth")


class AuthService:
    """Credential collaborator backed by the users table."""

    def __init__(self, session: Session, settings: Settings) -> None:
        """Initialize the service with a SQLAlchemy session and settings."""
        self.session = session
        self.settings = settings

    def register(self, name: str, email: str, password: str) -> AuthResponse:
        """Create an account and return its id with a fresh token."""
        name, email = name.strip(), email.strip().lower()
        if not name or not email or not password:
            raise ValidationError("Please fill all fields")
        if self._find_by_email(email) is not None:
            raise ValidationError("User already exists")

        user = User(name=name, email=email, password_hash=hash_password(password))
        with store_errors(self.session, "register"):
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
        logger.info(f"Registered user {user.id}")
        return self._response(user)

    def login(self, email: str, password: str) -> AuthResponse:
        """Check credentials and return a fresh token."""
        user = self._find_by_email(email.strip().lower())
        if user is None or not password or not verify_password(password, user.password_hash):
            raise ValidationError("Invalid credentials")
        return self._response(user)

    def resolve(self, token: str) -> str:
        """Return the stable id of the user a bearer token belongs to."""
        user_id = read_token(token, self.settings)
        if not user_id.isdigit():
            raise Unauthenticated("Invalid token payload")
        with store_errors(self.session, "resolve"):
            user = self.session.get(User, int(user_id))
        if user is None:
            raise Unauthenticated("User not found")
        return str(user.id)

    def _find_by_email(self, email: str) -> User | None:
        with store_errors(self.session, "find user"):
            return self.session.scalars(select(User).where(User.email == email)).first()

    def _response(self, user: User) -> AuthResponse:
        user_id = str(user.id)
        return AuthResponse(id=user_id, name=user.name, email=user.email, token=issue_token(user_id, self.settings))
