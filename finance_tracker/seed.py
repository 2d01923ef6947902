"""
Demo Data Seeding

Populates a store with one demo user and a month of activity so the
dashboard has something to show on first start.

Seeding is idempotent by username: if the demo user already exists the
store is left untouched.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from finance_tracker.audit import AuditLogger
from finance_tracker.config import DemoSettings, get_settings
from finance_tracker.models.finance import (
    AccountCreate,
    BudgetCreate,
    BudgetPeriod,
    CategoryCreate,
    CategoryType,
    TransactionCreate,
    TransactionType,
    User,
    UserCreate,
)
from finance_tracker.queries.aggregates import add_months
from finance_tracker.services.auth import PasswordService
from finance_tracker.services.storage import FinanceStorageInterface


# (name, color, icon, monthly budget or None)
DEMO_EXPENSE_CATEGORIES = (
    ("Housing", "#2ECC71", "home", Decimal("1500")),
    ("Food & Dining", "#3498DB", "shopping-cart", Decimal("800")),
    ("Transportation", "#E74C3C", "car", Decimal("300")),
    ("Entertainment", "#9B59B6", "film", Decimal("300")),
)

# (category name, amount, description, day of month, type, payment method)
DEMO_TRANSACTIONS = (
    ("Income", Decimal("2620"), "Paycheck", 15, TransactionType.INCOME, "Direct Deposit"),
    ("Housing", Decimal("1450"), "Rent Payment", 20, TransactionType.EXPENSE, "Bank Transfer"),
    ("Food & Dining", Decimal("84.32"), "Whole Foods Market", 24, TransactionType.EXPENSE, "Debit Card"),
    ("Transportation", Decimal("45.67"), "Shell Gas Station", 12, TransactionType.EXPENSE, "Credit Card"),
    ("Entertainment", Decimal("14.99"), "Netflix Subscription", 10, TransactionType.EXPENSE, "Credit Card"),
)


async def seed_demo_data(
    storage: FinanceStorageInterface,
    demo: Optional[DemoSettings] = None,
    password_service: Optional[PasswordService] = None,
    audit_logger: Optional[AuditLogger] = None,
    now: Optional[datetime] = None,
) -> Optional[User]:
    """
    Create the demo user and their accounts, categories, budgets and
    current-month transactions.

    Transactions are written straight to storage, so the checking
    balance is set once at the end from the net of the month.

    Returns:
        The demo user, or None if it already existed
    """
    demo = demo or get_settings().demo
    password_service = password_service or PasswordService()
    now = now or datetime.now()

    if await storage.get_user_by_username(demo.username):
        return None

    user = await storage.create_user(UserCreate(
        username=demo.username,
        password=password_service.hash_password(demo.password),
        email=demo.email,
        name=demo.name,
    ))

    checking = await storage.create_account(AccountCreate(
        user_id=user.id,
        name="Checking Account",
        type="checking",
        balance=Decimal("5000"),
        is_connected=False,
    ))
    await storage.create_account(AccountCreate(
        user_id=user.id,
        name="Savings Account",
        type="savings",
        balance=Decimal("3254"),
        is_connected=False,
    ))

    categories = {}
    for name, color, icon, _ in DEMO_EXPENSE_CATEGORIES:
        categories[name] = await storage.create_category(CategoryCreate(
            user_id=user.id,
            name=name,
            type=CategoryType.EXPENSE,
            color=color,
            icon=icon,
        ))
    categories["Income"] = await storage.create_category(CategoryCreate(
        user_id=user.id,
        name="Income",
        type=CategoryType.INCOME,
        color="#2ECC71",
        icon="dollar-sign",
    ))

    for name, _, _, limit in DEMO_EXPENSE_CATEGORIES:
        await storage.create_budget(BudgetCreate(
            user_id=user.id,
            category_id=categories[name].id,
            amount=limit,
            period=BudgetPeriod.MONTHLY,
            start_date=now,
            end_date=add_months(now, 1),
        ))

    net = Decimal("0")
    for category_name, amount, description, day, kind, method in DEMO_TRANSACTIONS:
        transaction = await storage.create_transaction(TransactionCreate(
            user_id=user.id,
            account_id=checking.id,
            category_id=categories[category_name].id,
            amount=amount,
            description=description,
            date=datetime(now.year, now.month, day),
            type=kind,
            payment_method=method,
        ))
        net += transaction.signed_amount

    await storage.update_account_balance(checking.id, net)

    if audit_logger:
        await audit_logger.log_demo_data_seeded(user_id=user.id, username=user.username)

    return user
