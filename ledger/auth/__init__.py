"""Auth package: password hashing, bearer tokens and the register/login service."""

from .service import AuthService  # noqa: F401
