"""
Data Models Package

This package contains all Pydantic models used by the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.finance import (
    Account,
    AccountCreate,
    Budget,
    BudgetCreate,
    BudgetPeriod,
    Category,
    CategoryCreate,
    CategoryType,
    LoginRequest,
    MonthlySummary,
    MonthlyTrendPoint,
    PublicUser,
    TimeFrame,
    Transaction,
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

__all__ = [
    # Finance models
    "Account",
    "AccountCreate",
    "Budget",
    "BudgetCreate",
    "BudgetPeriod",
    "Category",
    "CategoryCreate",
    "CategoryType",
    "LoginRequest",
    "MonthlySummary",
    "MonthlyTrendPoint",
    "PublicUser",
    "TimeFrame",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "User",
    "UserCreate",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
