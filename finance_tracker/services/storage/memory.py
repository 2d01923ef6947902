"""
In-Memory Storage Implementation

Holds every entity in per-kind dicts keyed by id, for the lifetime of
the process. Nothing survives a restart.

Each storage instance owns its own maps and id counters, so flows and
tests receive an explicitly constructed store instead of sharing a
module-level one.

None of the async methods awaits anything, so a single call is never
interleaved with another on the same event loop. The lock covers the
case where Streamlit serves sessions from several threads.
"""

import threading
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

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
from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    FinanceStorageInterface,
    NotFoundError,
)


def _newest_first(transactions: list[Transaction]) -> list[Transaction]:
    # Ties on date fall back to id so equal timestamps sort deterministically.
    return sorted(transactions, key=lambda t: (t.date, t.id), reverse=True)


class InMemoryFinanceStorage(FinanceStorageInterface):
    """
    Dict-backed implementation of FinanceStorageInterface.

    List-by-user results for accounts, categories and budgets come back
    in insertion order; transactions come back newest first.
    """

    def __init__(self):
        self._lock = threading.RLock()

        self._users: dict[int, User] = {}
        self._accounts: dict[int, Account] = {}
        self._categories: dict[int, Category] = {}
        self._transactions: dict[int, Transaction] = {}
        self._budgets: dict[int, Budget] = {}

        self._next_ids = {
            "user": 1,
            "account": 1,
            "category": 1,
            "transaction": 1,
            "budget": 1,
        }

    def _allocate_id(self, kind: str) -> int:
        """Hand out the next id for a kind. Caller must hold the lock."""
        next_id = self._next_ids[kind]
        self._next_ids[kind] = next_id + 1
        return next_id

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        wanted = username.lower()
        with self._lock:
            return next(
                (user for user in self._users.values() if user.username.lower() == wanted),
                None,
            )

    async def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.lower()
        with self._lock:
            return next(
                (user for user in self._users.values() if user.email.lower() == wanted),
                None,
            )

    async def create_user(self, user: UserCreate) -> User:
        with self._lock:
            stored = User(
                **user.model_dump(),
                id=self._allocate_id("user"),
                created_at=datetime.now(),
            )
            self._users[stored.id] = stored
            return stored

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def get_account(self, account_id: int) -> Optional[Account]:
        with self._lock:
            return self._accounts.get(account_id)

    async def get_accounts_by_user_id(self, user_id: int) -> list[Account]:
        with self._lock:
            return [a for a in self._accounts.values() if a.user_id == user_id]

    async def create_account(self, account: AccountCreate) -> Account:
        with self._lock:
            stored = Account(**account.model_dump(), id=self._allocate_id("account"))
            self._accounts[stored.id] = stored
            return stored

    async def update_account_balance(
        self,
        account_id: int,
        balance: Decimal,
    ) -> Account:
        if not isinstance(balance, Decimal):
            balance = Decimal(str(balance))

        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise NotFoundError(f"Account with ID {account_id} not found")

            updated = account.model_copy(update={"balance": balance})
            self._accounts[account_id] = updated
            return updated

    async def adjust_account_balance(
        self,
        account_id: int,
        delta: Decimal,
    ) -> Account:
        if not isinstance(delta, Decimal):
            delta = Decimal(str(delta))

        # Read and write under one lock hold
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise NotFoundError(f"Account with ID {account_id} not found")

            updated = account.model_copy(update={"balance": account.balance + delta})
            self._accounts[account_id] = updated
            return updated

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def get_category(self, category_id: int) -> Optional[Category]:
        with self._lock:
            return self._categories.get(category_id)

    async def get_categories_by_user_id(self, user_id: int) -> list[Category]:
        with self._lock:
            return [c for c in self._categories.values() if c.user_id == user_id]

    async def create_category(self, category: CategoryCreate) -> Category:
        with self._lock:
            stored = Category(**category.model_dump(), id=self._allocate_id("category"))
            self._categories[stored.id] = stored
            return stored

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        with self._lock:
            return self._transactions.get(transaction_id)

    async def get_transactions_by_user_id(self, user_id: int) -> list[Transaction]:
        with self._lock:
            owned = [t for t in self._transactions.values() if t.user_id == user_id]
        return _newest_first(owned)

    async def get_transactions_by_date_range(
        self,
        user_id: int,
        start_date: datetime,
        end_date: datetime,
    ) -> list[Transaction]:
        with self._lock:
            in_range = [
                t for t in self._transactions.values()
                if t.user_id == user_id and start_date <= t.date <= end_date
            ]
        return _newest_first(in_range)

    async def get_recent_transactions(
        self,
        user_id: int,
        limit: int,
    ) -> list[Transaction]:
        if limit <= 0:
            return []
        transactions = await self.get_transactions_by_user_id(user_id)
        return transactions[:limit]

    async def create_transaction(self, transaction: TransactionCreate) -> Transaction:
        with self._lock:
            stored = Transaction(
                **transaction.model_dump(),
                id=self._allocate_id("transaction"),
            )
            self._transactions[stored.id] = stored
            return stored

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def get_budget(self, budget_id: int) -> Optional[Budget]:
        with self._lock:
            return self._budgets.get(budget_id)

    async def get_budgets_by_user_id(self, user_id: int) -> list[Budget]:
        with self._lock:
            return [b for b in self._budgets.values() if b.user_id == user_id]

    async def create_budget(self, budget: BudgetCreate) -> Budget:
        with self._lock:
            stored = Budget(**budget.model_dump(), id=self._allocate_id("budget"))
            self._budgets[stored.id] = stored
            return stored


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._lock = threading.Lock()
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        with self._lock:
            return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_events_by_user(self, user_id: int) -> list[AuditEvent]:
        with self._lock:
            return [e for e in self._events if e.user_id == user_id]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        with self._lock:
            return list(reversed(self._events))[:limit]
