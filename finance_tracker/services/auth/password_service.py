"""
Password Hashing Service using bcrypt

DESIGN DECISION: Passwords are hashed before they reach storage.
The repository stores whatever it is given, so the auth flow is the
only place a plain-text password ever exists.

bcrypt only looks at the first 72 bytes of a password; longer inputs
are truncated explicitly so hashing never raises.
"""

from typing import Optional

import bcrypt

from finance_tracker.config import get_settings


BCRYPT_MAX_BYTES = 72


class AuthError(Exception):
    """Base exception for authentication errors."""
    pass


class UsernameTakenError(AuthError):
    """A user with this username already exists."""
    pass


class EmailInUseError(AuthError):
    """A user with this email already exists."""
    pass


class InvalidCredentialsError(AuthError):
    """Unknown username or wrong password."""
    pass


class PasswordService:
    """Hashes and verifies passwords with bcrypt."""

    def __init__(self, rounds: Optional[int] = None):
        self._rounds = rounds or get_settings().app.password_hash_rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash_password(self, password: str) -> str:
        """Hash a plain-text password."""
        hashed = bcrypt.hashpw(self._encode(password), bcrypt.gensalt(rounds=self._rounds))
        return hashed.decode("utf-8")

    def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Check a plain-text password against a stored hash.

        A stored value that is not a bcrypt hash never verifies.
        """
        try:
            return bcrypt.checkpw(self._encode(password), hashed_password.encode("utf-8"))
        except ValueError:
            return False
