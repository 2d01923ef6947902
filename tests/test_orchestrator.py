"""
Tests for the auth, ledger and dashboard flows.

The flows run against a fresh in-memory store with a cheap bcrypt cost.
"""

import asyncio
import threading
from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.finance import PublicUser, TransactionType
from finance_tracker.services.auth import (
    EmailInUseError,
    InvalidCredentialsError,
    UsernameTakenError,
)
from finance_tracker.services.storage import NotFoundError


REGISTRATION = {
    "username": "alice",
    "email": "alice@example.com",
    "password": "secret123",
    "name": "Alice",
}


@pytest.fixture
def alice(run, components):
    return run(components.auth_flow.register(REGISTRATION))


@pytest.fixture
def checking(run, components, alice):
    return run(components.ledger_flow.create_account(alice.id, {
        "name": "Checking",
        "type": "checking",
        "balance": "1000.00",
    }))


@pytest.fixture
def groceries(run, components, alice):
    return run(components.ledger_flow.create_category(alice.id, {
        "name": "Groceries",
        "type": "expense",
        "color": "#3498DB",
        "icon": "shopping-cart",
    }))


class TestAuthFlow:
    """Registration, login and current user."""

    def test_register_returns_public_user(self, alice):
        """The password never comes back."""
        assert isinstance(alice, PublicUser)
        assert alice.id == 1
        assert "password" not in alice.model_dump()

    def test_password_is_hashed_in_storage(self, run, storage, alice):
        """Storage holds a bcrypt hash, not the plain text."""
        stored = run(storage.get_user(alice.id))
        assert stored.password != "secret123"
        assert stored.password.startswith("$2")

    def test_duplicate_username_any_case_rejected(self, run, components, alice):
        with pytest.raises(UsernameTakenError, match="Username already taken"):
            run(components.auth_flow.register({**REGISTRATION, "username": "ALICE",
                                               "email": "other@example.com"}))

    def test_duplicate_email_any_case_rejected(self, run, components, alice):
        with pytest.raises(EmailInUseError, match="Email already in use"):
            run(components.auth_flow.register({**REGISTRATION, "username": "alice2",
                                               "email": "Alice@Example.COM"}))

    def test_invalid_payload_rejected(self, run, components):
        with pytest.raises(ValidationError):
            run(components.auth_flow.register({**REGISTRATION, "email": "not-an-email"}))

    def test_login_success(self, run, components, alice):
        user = run(components.auth_flow.login("Alice", "secret123"))
        assert user.id == alice.id

    def test_login_wrong_password(self, run, components, alice):
        with pytest.raises(InvalidCredentialsError):
            run(components.auth_flow.login("alice", "wrong-password"))

    def test_login_unknown_user(self, run, components):
        with pytest.raises(InvalidCredentialsError):
            run(components.auth_flow.login("nobody", "secret123"))

    def test_get_current_user(self, run, components, alice):
        assert run(components.auth_flow.get_current_user(alice.id)) == alice

    def test_get_current_user_missing(self, run, components):
        with pytest.raises(NotFoundError):
            run(components.auth_flow.get_current_user(7))

    def test_auth_events_audited(self, run, components, audit_storage, alice):
        """Registration, a failed and a successful login are all recorded."""
        with pytest.raises(InvalidCredentialsError):
            run(components.auth_flow.login("alice", "nope-nope"))
        run(components.auth_flow.login("alice", "secret123"))

        types = [e.event_type for e in run(audit_storage.get_recent_events())]
        assert types[:3] == [
            AuditEventType.LOGIN_SUCCEEDED,
            AuditEventType.LOGIN_FAILED,
            AuditEventType.USER_REGISTERED,
        ]


class TestLedgerFlow:
    """Creating records on behalf of the session user."""

    def test_user_id_comes_from_session(self, run, components, alice):
        """A user_id in the payload is overridden."""
        account = run(components.ledger_flow.create_account(alice.id, {
            "user_id": 999,
            "name": "Savings",
            "type": "savings",
        }))
        assert account.user_id == alice.id
        assert account.balance == Decimal("0")
        assert run(components.ledger_flow.list_accounts(alice.id)) == [account]

    def test_expense_lowers_balance(self, run, components, storage, alice, checking, groceries):
        transaction = run(components.ledger_flow.record_transaction(alice.id, {
            "account_id": checking.id,
            "category_id": groceries.id,
            "amount": "84.32",
            "description": "Whole Foods Market",
            "date": datetime(2024, 5, 24),
            "type": "expense",
            "payment_method": "Debit Card",
        }))

        assert transaction.id == 1
        assert transaction.type == TransactionType.EXPENSE
        assert run(storage.get_account(checking.id)).balance == Decimal("915.68")

    def test_income_raises_balance(self, run, components, storage, alice, checking):
        run(components.ledger_flow.record_transaction(alice.id, {
            "account_id": checking.id,
            "amount": "2620",
            "description": "Paycheck",
            "date": datetime(2024, 5, 15),
            "type": "income",
        }))
        assert run(storage.get_account(checking.id)).balance == Decimal("3620.00")

    def test_unknown_account_stores_nothing(self, run, components, storage, alice):
        with pytest.raises(NotFoundError):
            run(components.ledger_flow.record_transaction(alice.id, {
                "account_id": 42,
                "amount": "10",
                "description": "Lunch",
                "date": datetime(2024, 5, 15),
                "type": "expense",
            }))
        assert run(storage.get_transactions_by_user_id(alice.id)) == []

    def test_other_users_account_rejected(self, run, components, alice, checking):
        bob = run(components.auth_flow.register({
            **REGISTRATION, "username": "bob", "email": "bob@example.com",
        }))
        with pytest.raises(NotFoundError):
            run(components.ledger_flow.record_transaction(bob.id, {
                "account_id": checking.id,
                "amount": "10",
                "description": "Lunch",
                "date": datetime(2024, 5, 15),
                "type": "expense",
            }))

    def test_non_positive_amount_rejected(self, run, components, alice, checking):
        with pytest.raises(ValidationError):
            run(components.ledger_flow.record_transaction(alice.id, {
                "account_id": checking.id,
                "amount": "0",
                "description": "Nothing",
                "date": datetime(2024, 5, 15),
                "type": "expense",
            }))

    def test_budget_requires_own_category(self, run, components, alice, groceries):
        budget = run(components.ledger_flow.create_budget(alice.id, {
            "category_id": groceries.id,
            "amount": "800",
            "start_date": datetime(2024, 5, 1),
            "end_date": datetime(2024, 6, 1),
        }))
        assert run(components.ledger_flow.list_budgets(alice.id)) == [budget]

        with pytest.raises(NotFoundError):
            run(components.ledger_flow.create_budget(alice.id, {
                "category_id": 99,
                "amount": "800",
                "start_date": datetime(2024, 5, 1),
                "end_date": datetime(2024, 6, 1),
            }))

    def test_transaction_and_balance_share_correlation(
        self, run, components, audit_storage, alice, checking
    ):
        """The recorded transaction and its balance update are linked."""
        run(components.ledger_flow.record_transaction(alice.id, {
            "account_id": checking.id,
            "amount": "5",
            "description": "Coffee",
            "date": datetime(2024, 5, 15),
            "type": "expense",
        }))
        latest = run(audit_storage.get_recent_events(limit=1))[0]
        linked = run(audit_storage.get_events_by_correlation_id(latest.correlation_id))
        assert [e.event_type for e in linked] == [
            AuditEventType.TRANSACTION_RECORDED,
            AuditEventType.BALANCE_UPDATED,
        ]


class TestDashboardFlow:
    """Read views through the flow layer."""

    def test_recent_uses_configured_limit(self, run, components, alice, checking):
        for day in range(1, 8):
            run(components.ledger_flow.record_transaction(alice.id, {
                "account_id": checking.id,
                "amount": "1",
                "description": f"Day {day}",
                "date": datetime(2024, 5, day),
                "type": "expense",
            }))

        recent = run(components.dashboard_flow.recent_transactions(alice.id))
        assert [t.description for t in recent] == ["Day 7", "Day 6", "Day 5", "Day 4", "Day 3"]
        assert len(run(components.dashboard_flow.recent_transactions(alice.id, limit=2))) == 2

    def test_recent_with_explicit_zero_limit(self, run, components, alice, checking):
        """limit=0 means nothing, not the configured default."""
        run(components.ledger_flow.record_transaction(alice.id, {
            "account_id": checking.id,
            "amount": "1",
            "description": "Gum",
            "date": datetime(2024, 5, 1),
            "type": "expense",
        }))
        assert run(components.dashboard_flow.recent_transactions(alice.id, limit=0)) == []

    def test_feed_defaults_to_seven_days(self, run, components, alice, checking):
        now = datetime(2024, 5, 18, 12, 0)
        for day in (1, 15):
            run(components.ledger_flow.record_transaction(alice.id, {
                "account_id": checking.id,
                "amount": "1",
                "description": f"Day {day}",
                "date": datetime(2024, 5, day),
                "type": "expense",
            }))

        feed = run(components.dashboard_flow.transactions(alice.id, now=now))
        assert [t.description for t in feed] == ["Day 15"]

    def test_summary_reflects_recorded_transactions(self, run, components, alice, checking):
        reference = datetime(2024, 5, 18)
        run(components.ledger_flow.record_transaction(alice.id, {
            "account_id": checking.id,
            "amount": "500",
            "description": "Bonus",
            "date": datetime(2024, 5, 2),
            "type": "income",
        }))

        summary = run(components.dashboard_flow.summary(alice.id, reference=reference))
        assert summary.monthly_income == Decimal("500")
        assert summary.income_change == Decimal("0")
        assert summary.total_balance == Decimal("1500.00")


class TestTimezoneAwareDates:
    """Dates sent with an offset are stored as naive local time."""

    def test_utc_transaction_keeps_views_working(self, run, components, alice, checking):
        run(components.ledger_flow.record_transaction(alice.id, {
            "account_id": checking.id,
            "amount": "20",
            "description": "Online order",
            "date": "2024-05-10T12:00:00Z",
            "type": "expense",
        }))
        run(components.ledger_flow.record_transaction(alice.id, {
            "account_id": checking.id,
            "amount": "5",
            "description": "Corner shop",
            "date": datetime(2024, 5, 12, 9, 0),
            "type": "expense",
        }))

        now = datetime(2024, 5, 18, 12, 0)
        summary = run(components.dashboard_flow.summary(alice.id, reference=now))
        feed = run(components.dashboard_flow.transactions(alice.id, time_frame="30days", now=now))

        assert summary.monthly_expenses == Decimal("25")
        assert [t.description for t in feed] == ["Corner shop", "Online order"]
        assert all(t.date.tzinfo is None for t in feed)


class TestConcurrentRecording:
    """Balance updates from several threads."""

    def test_no_lost_balance_updates(self, components, alice):
        account = asyncio.run(components.ledger_flow.create_account(alice.id, {
            "name": "Shared",
            "type": "checking",
        }))

        def worker():
            for _ in range(100):
                asyncio.run(components.ledger_flow.record_transaction(alice.id, {
                    "account_id": account.id,
                    "amount": "1",
                    "description": "Tip",
                    "date": datetime(2024, 5, 15),
                    "type": "income",
                }))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stored = asyncio.run(components.storage.get_account(account.id))
        recorded = asyncio.run(components.storage.get_transactions_by_user_id(alice.id))
        assert len(recorded) == 400
        assert stored.balance == Decimal("400")
