"""Authentication services package."""

from finance_tracker.services.auth.password_service import (
    AuthError,
    EmailInUseError,
    InvalidCredentialsError,
    PasswordService,
    UsernameTakenError,
)

__all__ = [
    "AuthError",
    "EmailInUseError",
    "InvalidCredentialsError",
    "PasswordService",
    "UsernameTakenError",
]
