"""Services package."""

from finance_tracker.services.auth import (
    AuthError,
    EmailInUseError,
    InvalidCredentialsError,
    PasswordService,
    UsernameTakenError,
)
from finance_tracker.services.storage import (
    AuditStorageInterface,
    FinanceStorageInterface,
    InMemoryAuditStorage,
    InMemoryFinanceStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Auth services
    "AuthError",
    "EmailInUseError",
    "InvalidCredentialsError",
    "PasswordService",
    "UsernameTakenError",
    # Storage services
    "AuditStorageInterface",
    "FinanceStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryFinanceStorage",
    "NotFoundError",
    "StorageError",
]
