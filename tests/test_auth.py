"""Tests for the credential collaborator."""

from datetime import timedelta

import jwt
import pytest

from ledger.auth.passwords import hash_password, verify_password
from ledger.auth.service import AuthService
from ledger.auth.tokens import issue_token, read_token
from ledger.core.errors import Unauthenticated, ValidationError
from ledger.core.utils import utcnow


@pytest.fixture
def auth(session, settings) -> AuthService:
    """Auth service on a fresh temporary database."""
    return AuthService(session, settings)


def test_password_hash_round_trip() -> None:
    hashed = hash_password("hunter22")

    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)


def test_token_carries_user_id(settings) -> None:
    assert read_token(issue_token("42", settings), settings) == "42"


def test_expired_token_is_rejected(settings) -> None:
    token = jwt.encode({"id": "42", "exp": utcnow() - timedelta(seconds=5)}, settings.jwt_secret, algorithm="HS256")

    with pytest.raises(Unauthenticated):
        read_token(token, settings)


def test_token_signed_with_other_secret_is_rejected(settings) -> None:
    token = jwt.encode({"id": "42"}, "another-secret-that-is-long-enough-too", algorithm="HS256")

    with pytest.raises(Unauthenticated):
        read_token(token, settings)


def test_token_without_id_is_rejected(settings) -> None:
    token = jwt.encode({"sub": "42"}, settings.jwt_secret, algorithm="HS256")

    with pytest.raises(Unauthenticated):
        read_token(token, settings)


@pytest.mark.integration
class TestAuthService:
    """Register, login and resolve against a real temp db."""

    def test_register_then_resolve(self, auth: AuthService):
        response = auth.register("Ada", "Ada@Example.com", "s3cret-pass")

        assert response.email == "ada@example.com"
        assert auth.resolve(response.token) == response.id

    def test_register_requires_all_fields(self, auth: AuthService):
        with pytest.raises(ValidationError):
            auth.register("Ada", "", "s3cret-pass")

    def test_duplicate_email(self, auth: AuthService):
        auth.register("Ada", "ada@example.com", "s3cret-pass")

        with pytest.raises(ValidationError, match="already exists"):
            auth.register("Ada Again", "ada@example.com", "other-pass")

    def test_login(self, auth: AuthService):
        registered = auth.register("Ada", "ada@example.com", "s3cret-pass")

        logged_in = auth.login("ada@example.com", "s3cret-pass")

        assert logged_in.id == registered.id
        assert auth.resolve(logged_in.token) == registered.id

    @pytest.mark.parametrize(
        ("email", "password"), [("ada@example.com", "wrong"), ("nobody@example.com", "s3cret-pass")]
    )
    def test_login_failures_look_the_same(self, auth: AuthService, email: str, password: str):
        auth.register("Ada", "ada@example.com", "s3cret-pass")

        with pytest.raises(ValidationError, match="Invalid credentials"):
            auth.login(email, password)

    def test_token_for_unknown_user(self, auth: AuthService, settings):
        with pytest.raises(Unauthenticated):
            auth.resolve(issue_token("999", settings))
