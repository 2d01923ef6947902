"""
Tests for the Finance Tracker models

Test strategy:
1. Unit tests for individual models and validators
2. Flow tests live in test_orchestrator.py and run against in-memory storage
3. No external services anywhere in the suite
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from finance_tracker.models.finance import (
    Account,
    BudgetCreate,
    BudgetPeriod,
    CategoryCreate,
    CategoryType,
    MonthlySummary,
    MonthlyTrendPoint,
    PublicUser,
    TimeFrame,
    TransactionCreate,
    TransactionType,
    User,
    UserCreate,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestUserModels:
    """Tests for registration and user models."""

    def test_user_create_strips_whitespace(self):
        user = UserCreate(
            username="  alice  ",
            email="alice@example.com",
            password="secret123",
            name="Alice",
        )
        assert user.username == "alice"

    @pytest.mark.parametrize("field,value", [
        ("username", "ab"),
        ("email", "alice.example.com"),
        ("password", "12345"),
        ("name", ""),
    ])
    def test_user_create_rejects_bad_fields(self, field, value):
        data = {
            "username": "alice",
            "email": "alice@example.com",
            "password": "secret123",
            "name": "Alice",
        }
        data[field] = value
        with pytest.raises(ValidationError):
            UserCreate(**data)

    def test_stored_user_is_frozen(self):
        user = User(
            id=1,
            username="alice",
            email="alice@example.com",
            password="hash-value",
            name="Alice",
            created_at=datetime(2024, 1, 1),
        )
        with pytest.raises(ValidationError):
            user.name = "Bob"

    def test_public_user_drops_password(self):
        user = User(
            id=3,
            username="alice",
            email="alice@example.com",
            password="hash-value",
            name="Alice",
            created_at=datetime(2024, 1, 1),
        )
        public = PublicUser.from_user(user)
        assert public.id == 3
        assert "password" not in public.model_dump()


class TestLedgerModels:
    """Tests for accounts, categories, transactions and budgets."""

    def test_account_defaults(self):
        account = Account(id=1, user_id=1, name="Wallet", type="cash")
        assert account.balance == Decimal("0")
        assert account.is_connected is False

    def test_account_balance_may_be_negative(self):
        """Credit accounts go below zero."""
        account = Account(id=1, user_id=1, name="Card", type="credit", balance="-120.50")
        assert account.balance == Decimal("-120.50")

    def test_category_colour_must_be_hex(self):
        with pytest.raises(ValidationError):
            CategoryCreate(user_id=1, name="Food", type="expense", color="blue")

    def test_category_defaults(self):
        category = CategoryCreate(user_id=1, name="Food", type="expense")
        assert category.type == CategoryType.EXPENSE
        assert category.color == "#3498DB"
        assert category.icon == "tag"

    def test_transaction_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            TransactionCreate(
                user_id=1,
                account_id=1,
                amount=Decimal("-5"),
                description="Refund",
                date=datetime(2024, 1, 1),
                type="expense",
            )

    def test_transaction_amount_limited_to_cents(self):
        with pytest.raises(ValidationError):
            TransactionCreate(
                user_id=1,
                account_id=1,
                amount=Decimal("1.005"),
                description="Gum",
                date=datetime(2024, 1, 1),
                type="expense",
            )

    def test_signed_amount(self):
        """Income adds, expense subtracts."""
        common = {
            "user_id": 1,
            "account_id": 1,
            "amount": Decimal("12.50"),
            "description": "Something",
            "date": datetime(2024, 1, 1),
        }
        income = TransactionCreate(**common, type=TransactionType.INCOME)
        expense = TransactionCreate(**common, type=TransactionType.EXPENSE)
        assert income.signed_amount == Decimal("12.50")
        assert expense.signed_amount == Decimal("-12.50")

    def test_transaction_parses_iso_date(self):
        transaction = TransactionCreate(
            user_id=1,
            account_id=1,
            amount="3.20",
            description="Bus",
            date="2024-05-10T08:15:00",
            type="expense",
        )
        assert transaction.date == datetime(2024, 5, 10, 8, 15)
        assert transaction.category_id is None

    def test_transaction_offset_date_becomes_naive_local(self):
        """An offset date is converted to local time without tzinfo."""
        transaction = TransactionCreate(
            user_id=1,
            account_id=1,
            amount="3.20",
            description="Bus",
            date="2024-05-10T12:00:00Z",
            type="expense",
        )
        expected = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert transaction.date.tzinfo is None
        assert transaction.date == expected

    def test_budget_offset_dates_become_naive(self):
        budget = BudgetCreate(
            user_id=1,
            category_id=1,
            amount=Decimal("300"),
            start_date="2024-05-01T00:00:00+02:00",
            end_date="2024-06-01T00:00:00+02:00",
        )
        assert budget.start_date.tzinfo is None
        assert budget.end_date.tzinfo is None

    def test_budget_defaults_to_monthly(self):
        budget = BudgetCreate(
            user_id=1,
            category_id=1,
            amount=Decimal("300"),
            start_date=datetime(2024, 5, 1),
            end_date=datetime(2024, 6, 1),
        )
        assert budget.period == BudgetPeriod.MONTHLY

    def test_budget_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="end date cannot be before start date"):
            BudgetCreate(
                user_id=1,
                category_id=1,
                amount=Decimal("300"),
                start_date=datetime(2024, 6, 1),
                end_date=datetime(2024, 5, 1),
            )


class TestDerivedModels:
    """Tests for the dashboard view models."""

    def test_time_frame_values(self):
        assert [f.value for f in TimeFrame] == ["7days", "30days", "90days", "year"]

    def test_summary_rejects_long_trend(self):
        point = MonthlyTrendPoint(month="Jan", income=Decimal("1"), expenses=Decimal("1"))
        with pytest.raises(ValidationError):
            MonthlySummary(
                total_balance=Decimal("0"),
                balance_change=Decimal("0"),
                monthly_income=Decimal("0"),
                income_change=Decimal("0"),
                monthly_expenses=Decimal("0"),
                expenses_change=Decimal("0"),
                monthly_savings=Decimal("0"),
                savings_change=Decimal("0"),
                monthly_data=[point] * 13,
            )


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            description="Account created: Checking",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=7,
            user_id=1,
            correlation_id=correlation_id,
            description="Transaction recorded",
        )
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "transaction_recorded"
        assert log_dict["entity_id"] == 7
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_builder_balance_updated(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.balance_updated(
            account_id=2,
            user_id=1,
            old_balance=Decimal("100.00"),
            new_balance=Decimal("90.00"),
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.BALANCE_UPDATED
        assert event.details == {"old_balance": "100.00", "new_balance": "90.00"}
        assert event.correlation_id == correlation_id

    def test_builder_login_failed_is_warning(self):
        event = AuditEventBuilder.login_failed(username="mallory")
        assert event.severity == AuditSeverity.WARNING
        assert event.user_id is None
        assert event.details["username"] == "mallory"

    def test_builder_entity_created_maps_type(self):
        event = AuditEventBuilder.entity_created(
            entity_type="budget", entity_id=4, user_id=1, name="Food",
        )
        assert event.event_type == AuditEventType.BUDGET_CREATED
        assert event.description == "Budget created: Food"
