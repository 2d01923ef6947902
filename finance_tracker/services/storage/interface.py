"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the in-memory store for a real database later
2. Hand each test its own fresh store
3. Keep flows and aggregations decoupled from how records are held

Methods are async so a database-backed implementation can slot in
without changing callers. Lookups return None when nothing matches;
only the balance update and adjustment raise NotFoundError.

The interface does NOT enforce username/email uniqueness or that
referenced ids exist. Callers check before they create.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from finance_tracker.models.audit import AuditEvent
from finance_tracker.models.finance import (
    Account,
    AccountCreate,
    Budget,
    BudgetCreate,
    Category,
    CategoryCreate,
    Transaction,
    TransactionCreate,
    User,
    UserCreate,
)


class FinanceStorageInterface(ABC):
    """
    Abstract interface for the five entity kinds.

    Ids are assigned per kind, starting at 1, and never reused.
    """

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]:
        """Retrieve a user by id, or None."""
        pass

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        """
        Retrieve a user by username, ignoring case.

        If duplicates exist the first match wins.
        """
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by email, ignoring case."""
        pass

    @abstractmethod
    async def create_user(self, user: UserCreate) -> User:
        """
        Store a new user.

        Assigns the next user id and stamps created_at with the current time.
        """
        pass

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_account(self, account_id: int) -> Optional[Account]:
        pass

    @abstractmethod
    async def get_accounts_by_user_id(self, user_id: int) -> list[Account]:
        pass

    @abstractmethod
    async def create_account(self, account: AccountCreate) -> Account:
        pass

    @abstractmethod
    async def update_account_balance(
        self,
        account_id: int,
        balance: Decimal,
    ) -> Account:
        """
        Replace an account's balance.

        Args:
            account_id: The account to update
            balance: The new balance (not a delta)

        Returns:
            The updated account; every other field is unchanged

        Raises:
            NotFoundError: If the account doesn't exist
        """
        pass

    @abstractmethod
    async def adjust_account_balance(
        self,
        account_id: int,
        delta: Decimal,
    ) -> Account:
        """
        Add a delta to an account's balance as one atomic step.

        Concurrent adjustments on the same account never lose an update.

        Returns:
            The updated account

        Raises:
            NotFoundError: If the account doesn't exist
        """
        pass

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_category(self, category_id: int) -> Optional[Category]:
        pass

    @abstractmethod
    async def get_categories_by_user_id(self, user_id: int) -> list[Category]:
        pass

    @abstractmethod
    async def create_category(self, category: CategoryCreate) -> Category:
        pass

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        pass

    @abstractmethod
    async def get_transactions_by_user_id(self, user_id: int) -> list[Transaction]:
        """All of a user's transactions, newest first."""
        pass

    @abstractmethod
    async def get_transactions_by_date_range(
        self,
        user_id: int,
        start_date: datetime,
        end_date: datetime,
    ) -> list[Transaction]:
        """
        A user's transactions dated within [start_date, end_date], newest first.

        Both bounds are inclusive.
        """
        pass

    @abstractmethod
    async def get_recent_transactions(
        self,
        user_id: int,
        limit: int,
    ) -> list[Transaction]:
        """The first `limit` entries of get_transactions_by_user_id."""
        pass

    @abstractmethod
    async def create_transaction(self, transaction: TransactionCreate) -> Transaction:
        """
        Store a new transaction.

        Does NOT touch the account balance; that is the caller's job.
        """
        pass

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_budget(self, budget_id: int) -> Optional[Budget]:
        pass

    @abstractmethod
    async def get_budgets_by_user_id(self, user_id: int) -> list[Budget]:
        pass

    @abstractmethod
    async def create_budget(self, budget: BudgetCreate) -> Budget:
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(self, correlation_id) -> list[AuditEvent]:
        """Events sharing a correlation id, in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_user(self, user_id: int) -> list[AuditEvent]:
        """Events recorded on behalf of a user, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """The most recent events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass
