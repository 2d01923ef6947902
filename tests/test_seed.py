"""Tests for demo data seeding."""

from datetime import datetime
from decimal import Decimal

from finance_tracker.config import DemoSettings
from finance_tracker.models.audit import AuditEventType
from finance_tracker.seed import seed_demo_data


NOW = datetime(2024, 5, 18, 12, 0)
DEMO = DemoSettings(username="demo", password="password", email="demo@example.com", name="Demo User")


class TestSeedDemoData:
    """Seeding the demo dataset."""

    def test_creates_demo_dataset(self, run, storage, password_service):
        user = run(seed_demo_data(storage, demo=DEMO, password_service=password_service, now=NOW))

        assert user.username == "demo"
        assert len(run(storage.get_accounts_by_user_id(user.id))) == 2
        assert len(run(storage.get_categories_by_user_id(user.id))) == 5
        assert len(run(storage.get_budgets_by_user_id(user.id))) == 4
        assert len(run(storage.get_transactions_by_user_id(user.id))) == 5

    def test_balances(self, run, storage, password_service):
        """Checking holds the month's net; savings keeps its opening balance."""
        user = run(seed_demo_data(storage, demo=DEMO, password_service=password_service, now=NOW))
        checking, savings = run(storage.get_accounts_by_user_id(user.id))
        assert checking.balance == Decimal("1025.02")
        assert savings.balance == Decimal("3254")

    def test_transactions_fall_in_current_month(self, run, storage, password_service):
        user = run(seed_demo_data(storage, demo=DEMO, password_service=password_service, now=NOW))
        transactions = run(storage.get_transactions_by_user_id(user.id))
        assert {(t.date.year, t.date.month) for t in transactions} == {(2024, 5)}
        assert transactions[0].description == "Whole Foods Market"

    def test_demo_password_verifies(self, run, storage, password_service):
        user = run(seed_demo_data(storage, demo=DEMO, password_service=password_service, now=NOW))
        assert password_service.verify_password("password", user.password)

    def test_seeding_twice_is_a_no_op(self, run, storage, password_service):
        run(seed_demo_data(storage, demo=DEMO, password_service=password_service, now=NOW))
        assert run(seed_demo_data(storage, demo=DEMO, password_service=password_service, now=NOW)) is None
        assert run(storage.get_user(2)) is None
        assert len(run(storage.get_transactions_by_user_id(1))) == 5

    def test_seeding_is_audited(self, run, storage, audit_logger, audit_storage, password_service):
        user = run(seed_demo_data(
            storage, demo=DEMO, password_service=password_service,
            audit_logger=audit_logger, now=NOW,
        ))
        events = run(audit_storage.get_events_by_user(user.id))
        assert [e.event_type for e in events] == [AuditEventType.DEMO_DATA_SEEDED]
