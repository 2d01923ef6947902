"""
Main Orchestrator for the Finance Tracker

This module ties together all the components and defines the flows a
front end calls:
1. Auth (register → login → current user)
2. Ledger (accounts, categories, budgets, transactions)
3. Dashboard (summary, budget progress, transaction feeds)

DESIGN DECISION: The orchestrator enforces the boundaries the
repository deliberately leaves to its callers:
- Usernames and emails are checked before a user is created
- Every ledger record is stamped with the session's user id
- Recording a transaction moves the account balance
- Every step is audited

Each flow receives the storage instance it works on. There is no
module-level store.
"""

from datetime import datetime
from typing import Any, NamedTuple, Optional, Union
from uuid import UUID

from pydantic import BaseModel

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.finance import (
    Account,
    AccountCreate,
    Budget,
    BudgetCreate,
    Category,
    CategoryCreate,
    LoginRequest,
    MonthlySummary,
    PublicUser,
    TimeFrame,
    Transaction,
    TransactionCreate,
    UserCreate,
)
from finance_tracker.queries import FinanceQueryExecutor
from finance_tracker.services.auth import (
    EmailInUseError,
    InvalidCredentialsError,
    PasswordService,
    UsernameTakenError,
)
from finance_tracker.services.storage import (
    FinanceStorageInterface,
    InMemoryAuditStorage,
    InMemoryFinanceStorage,
    NotFoundError,
)


Payload = Union[dict[str, Any], BaseModel]


def _as_dict(payload: Payload) -> dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump()
    return dict(payload)


class AuthFlow:
    """
    Registration and login.

    Uniqueness is checked here, not in storage, so two concurrent
    registrations for the same name could both pass the check.
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        password_service: Optional[PasswordService] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._passwords = password_service or PasswordService()
        self._audit_logger = audit_logger

    async def register(
        self,
        payload: Payload,
        correlation_id: Optional[UUID] = None,
    ) -> PublicUser:
        """
        Create a new user.

        Raises:
            pydantic.ValidationError: If the payload is malformed
            UsernameTakenError: If the username exists (any case)
            EmailInUseError: If the email exists (any case)
        """
        correlation_id = correlation_id or create_correlation_id()
        data = UserCreate.model_validate(_as_dict(payload))

        if await self._storage.get_user_by_username(data.username):
            if self._audit_logger:
                await self._audit_logger.log_registration_rejected(
                    username=data.username,
                    reason="username taken",
                    correlation_id=correlation_id,
                )
            raise UsernameTakenError("Username already taken")

        if await self._storage.get_user_by_email(data.email):
            if self._audit_logger:
                await self._audit_logger.log_registration_rejected(
                    username=data.username,
                    reason="email in use",
                    correlation_id=correlation_id,
                )
            raise EmailInUseError("Email already in use")

        hashed = data.model_copy(
            update={"password": self._passwords.hash_password(data.password)}
        )
        user = await self._storage.create_user(hashed)

        if self._audit_logger:
            await self._audit_logger.log_user_registered(
                user_id=user.id,
                username=user.username,
                correlation_id=correlation_id,
            )

        return PublicUser.from_user(user)

    async def login(
        self,
        username: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> PublicUser:
        """
        Check credentials.

        The caller keeps the returned user's id as its session.

        Raises:
            InvalidCredentialsError: Unknown user or wrong password
        """
        correlation_id = correlation_id or create_correlation_id()
        credentials = LoginRequest(username=username, password=password)

        user = await self._storage.get_user_by_username(credentials.username)
        if user is None or not self._passwords.verify_password(
            credentials.password, user.password
        ):
            if self._audit_logger:
                await self._audit_logger.log_login_failed(
                    username=credentials.username,
                    correlation_id=correlation_id,
                )
            raise InvalidCredentialsError("Invalid credentials")

        if self._audit_logger:
            await self._audit_logger.log_login_succeeded(
                user_id=user.id,
                username=user.username,
                correlation_id=correlation_id,
            )

        return PublicUser.from_user(user)

    async def get_current_user(self, user_id: int) -> PublicUser:
        """
        Raises:
            NotFoundError: If the session points at a user that doesn't exist
        """
        user = await self._storage.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return PublicUser.from_user(user)


class LedgerFlow:
    """
    Creates and lists a user's accounts, categories, budgets and transactions.

    Payloads are request bodies: any ``user_id`` they carry is replaced
    with the session's user id before validation.
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger

    @staticmethod
    def _validated(model, user_id: int, payload: Payload):
        return model.model_validate({**_as_dict(payload), "user_id": user_id})

    async def _owned_account(self, user_id: int, account_id: int) -> Account:
        account = await self._storage.get_account(account_id)
        if account is None or account.user_id != user_id:
            raise NotFoundError(f"Account with ID {account_id} not found")
        return account

    async def _owned_category(self, user_id: int, category_id: int) -> Category:
        category = await self._storage.get_category(category_id)
        if category is None or category.user_id != user_id:
            raise NotFoundError(f"Category with ID {category_id} not found")
        return category

    # Accounts

    async def create_account(self, user_id: int, payload: Payload) -> Account:
        data = self._validated(AccountCreate, user_id, payload)
        account = await self._storage.create_account(data)

        if self._audit_logger:
            await self._audit_logger.log_entity_created(
                entity_type="account",
                entity_id=account.id,
                user_id=user_id,
                name=account.name,
            )
        return account

    async def list_accounts(self, user_id: int) -> list[Account]:
        return await self._storage.get_accounts_by_user_id(user_id)

    # Categories

    async def create_category(self, user_id: int, payload: Payload) -> Category:
        data = self._validated(CategoryCreate, user_id, payload)
        category = await self._storage.create_category(data)

        if self._audit_logger:
            await self._audit_logger.log_entity_created(
                entity_type="category",
                entity_id=category.id,
                user_id=user_id,
                name=category.name,
            )
        return category

    async def list_categories(self, user_id: int) -> list[Category]:
        return await self._storage.get_categories_by_user_id(user_id)

    # Budgets

    async def create_budget(self, user_id: int, payload: Payload) -> Budget:
        """
        Raises:
            NotFoundError: If the category isn't one of the user's
        """
        data = self._validated(BudgetCreate, user_id, payload)
        category = await self._owned_category(user_id, data.category_id)
        budget = await self._storage.create_budget(data)

        if self._audit_logger:
            await self._audit_logger.log_entity_created(
                entity_type="budget",
                entity_id=budget.id,
                user_id=user_id,
                name=category.name,
            )
        return budget

    async def list_budgets(self, user_id: int) -> list[Budget]:
        return await self._storage.get_budgets_by_user_id(user_id)

    # Transactions

    async def list_transactions(self, user_id: int) -> list[Transaction]:
        return await self._storage.get_transactions_by_user_id(user_id)

    async def record_transaction(
        self,
        user_id: int,
        payload: Payload,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Store a transaction and move its account's balance.

        Income adds the amount to the balance; expense subtracts it.

        Raises:
            pydantic.ValidationError: If the payload is malformed
            NotFoundError: If the account or category isn't one of the user's.
                Nothing is stored in that case.
        """
        correlation_id = correlation_id or create_correlation_id()
        data = self._validated(TransactionCreate, user_id, payload)

        account = await self._owned_account(user_id, data.account_id)
        if data.category_id is not None:
            await self._owned_category(user_id, data.category_id)

        transaction = await self._storage.create_transaction(data)
        if self._audit_logger:
            await self._audit_logger.log_transaction_recorded(
                transaction_id=transaction.id,
                user_id=user_id,
                transaction_type=transaction.type.value,
                amount=transaction.amount,
                correlation_id=correlation_id,
            )

        try:
            updated = await self._storage.adjust_account_balance(
                account.id, transaction.signed_amount
            )
        except NotFoundError as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type="balance_update_failed",
                    error_message=str(e),
                    details={"transaction_id": transaction.id},
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_balance_updated(
                account_id=updated.id,
                user_id=user_id,
                old_balance=updated.balance - transaction.signed_amount,
                new_balance=updated.balance,
                correlation_id=correlation_id,
            )

        return transaction


class DashboardFlow:
    """Read-only views: summary, budget progress and transaction feeds."""

    def __init__(
        self,
        storage: FinanceStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._executor = FinanceQueryExecutor(storage)
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().app

    async def _audit_query(self, user_id: int, query_type: str, result_count: int) -> None:
        if self._audit_logger:
            await self._audit_logger.log_query_executed(
                user_id=user_id,
                query_type=query_type,
                result_count=result_count,
            )

    async def summary(
        self,
        user_id: int,
        reference: Optional[datetime] = None,
    ) -> MonthlySummary:
        summary = await self._executor.monthly_summary(user_id, reference=reference)
        await self._audit_query(user_id, "summary", 1)
        return summary

    async def budget_progress(
        self,
        user_id: int,
        year_month: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        """
        Raises:
            QueryExecutionError: If year_month is malformed
        """
        progress = await self._executor.budget_progress(user_id, year_month=year_month, now=now)
        await self._audit_query(user_id, "budget_progress", len(progress))
        return progress

    async def transactions(
        self,
        user_id: int,
        time_frame: Optional[Union[str, TimeFrame]] = None,
        category_id: Optional[Union[int, str]] = None,
        now: Optional[datetime] = None,
    ) -> list[Transaction]:
        """
        Raises:
            QueryExecutionError: If category_id is not numeric or "all"
        """
        transactions = await self._executor.transaction_feed(
            user_id,
            time_frame=time_frame or self._settings.default_time_frame,
            category_id=category_id,
            now=now,
        )
        await self._audit_query(user_id, "transactions", len(transactions))
        return transactions

    async def recent_transactions(
        self,
        user_id: int,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        transactions = await self._executor.recent_transactions(
            user_id,
            limit if limit is not None else self._settings.recent_transactions_limit,
        )
        await self._audit_query(user_id, "recent_transactions", len(transactions))
        return transactions


class AppComponents(NamedTuple):
    auth_flow: AuthFlow
    ledger_flow: LedgerFlow
    dashboard_flow: DashboardFlow
    storage: FinanceStorageInterface
    audit_logger: AuditLogger


def create_app_components(
    storage: Optional[FinanceStorageInterface] = None,
    audit_logger: Optional[AuditLogger] = None,
    password_service: Optional[PasswordService] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        storage: Finance store to share between the flows.
                 A fresh in-memory store is created when omitted.
        audit_logger: Audit logger. Defaults to one backed by an
                      in-memory audit store.
        password_service: Password hasher (tests pass a cheap one).

    Returns:
        AppComponents(auth_flow, ledger_flow, dashboard_flow, storage, audit_logger)
    """
    storage = storage or InMemoryFinanceStorage()
    audit_logger = audit_logger or AuditLogger(InMemoryAuditStorage())

    return AppComponents(
        auth_flow=AuthFlow(storage, password_service=password_service, audit_logger=audit_logger),
        ledger_flow=LedgerFlow(storage, audit_logger=audit_logger),
        dashboard_flow=DashboardFlow(storage, audit_logger=audit_logger),
        storage=storage,
        audit_logger=audit_logger,
    )
