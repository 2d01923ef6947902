"""
Core Data Models for the Finance Tracker

These models define the schemas for every entity the tracker stores and
every view it derives. They are designed to:
1. Validate insert payloads before they reach storage
2. Keep stored records immutable (the account balance is replaced, never edited)
3. Represent money as Decimal so sums do not drift

Each entity kind has an insert-shape (``XxxCreate``) holding the fields a
caller supplies, and a stored model adding the server-assigned ``id``
(and ``created_at`` for users).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def _to_naive_local(value: datetime) -> datetime:
    """
    Stored dates are naive local time.

    Timezone-aware input (e.g. "2024-05-10T12:00:00Z") is converted to
    local time and its offset dropped, so every comparison against
    month bounds and `now` is naive-to-naive.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money movement."""
    INCOME = "income"
    EXPENSE = "expense"


class CategoryType(str, Enum):
    """Whether a category groups income or spending."""
    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    """How often a budget resets."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TimeFrame(str, Enum):
    """
    Relative date windows offered by the transaction feed.

    Anything not listed here falls back to SEVEN_DAYS.
    """
    SEVEN_DAYS = "7days"
    THIRTY_DAYS = "30days"
    NINETY_DAYS = "90days"
    YEAR = "year"


# =============================================================================
# USERS
# =============================================================================

class UserCreate(BaseModel):
    """Registration payload."""
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Login name (unique, case-insensitive)"
    )
    email: str = Field(
        ...,
        max_length=254,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Email address (unique, case-insensitive)"
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password, hashed by the auth flow before storage"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )


class User(UserCreate):
    """A stored user."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0)
    created_at: datetime = Field(
        ...,
        description="When the user was created"
    )


class PublicUser(BaseModel):
    """
    A user as returned to callers.

    The password (hash) never leaves the flow layer.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    name: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
        )


class LoginRequest(BaseModel):
    """Credentials submitted at login."""
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


# =============================================================================
# ACCOUNTS
# =============================================================================

class AccountCreate(BaseModel):
    """
    Payload for a new financial account.

    ``is_connected`` is informational only; no bank connectivity exists.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: int = Field(..., gt=0)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Account name (e.g., Checking Account)"
    )
    type: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Account type (e.g., checking, savings, credit)"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        decimal_places=2,
        description="Opening balance"
    )
    is_connected: bool = Field(
        default=False,
        description="Whether the account is linked to a bank feed"
    )


class Account(AccountCreate):
    """A stored account. Only ``balance`` is ever replaced."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0)


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryCreate(BaseModel):
    """Payload for a new spending or income category."""
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: int = Field(..., gt=0)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100
    )
    type: CategoryType
    color: str = Field(
        default="#3498DB",
        pattern=r"^#[0-9A-Fa-f]{6}$",
        description="Hex colour used by charts"
    )
    icon: str = Field(
        default="tag",
        min_length=1,
        max_length=50,
        description="Icon name used by the UI"
    )


class Category(CategoryCreate):
    """A stored category."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0)


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionCreate(BaseModel):
    """
    Payload for a new transaction.

    ``amount`` is always a positive magnitude; ``type`` carries the sign.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: int = Field(..., gt=0)
    account_id: int = Field(..., gt=0)
    category_id: Optional[int] = Field(
        default=None,
        gt=0,
        description="Category, if the transaction is categorised"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Positive amount"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=200
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened"
    )
    type: TransactionType
    payment_method: Optional[str] = Field(
        default=None,
        max_length=50,
        description="e.g., Debit Card, Bank Transfer"
    )

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return _to_naive_local(v)

    @property
    def signed_amount(self) -> Decimal:
        """Amount as it affects the account balance."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


class Transaction(TransactionCreate):
    """A stored transaction."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0)


# =============================================================================
# BUDGETS
# =============================================================================

class BudgetCreate(BaseModel):
    """Payload for a new budget on one category."""

    user_id: int = Field(..., gt=0)
    category_id: int = Field(..., gt=0)
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Spending limit for the period"
    )
    period: BudgetPeriod = Field(default=BudgetPeriod.MONTHLY)
    start_date: datetime
    end_date: datetime

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return _to_naive_local(v)

    @model_validator(mode='after')
    def validate_dates(self) -> 'BudgetCreate':
        """End date cannot precede start date."""
        if self.end_date < self.start_date:
            raise ValueError("Budget end date cannot be before start date")
        return self


class Budget(BudgetCreate):
    """A stored budget."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0)


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class MonthlyTrendPoint(BaseModel):
    """One month of the spending chart series."""

    month: str = Field(..., min_length=3, max_length=3)
    income: Decimal
    expenses: Decimal


class MonthlySummary(BaseModel):
    """
    Month-over-month dashboard figures.

    Percent changes are 0 whenever the previous month's figure is 0.
    ``balance_change`` and ``monthly_data`` are placeholder values,
    not derived from stored transactions.
    """

    total_balance: Decimal
    balance_change: Decimal
    monthly_income: Decimal
    income_change: Decimal
    monthly_expenses: Decimal
    expenses_change: Decimal
    monthly_savings: Decimal
    savings_change: Decimal
    monthly_data: list[MonthlyTrendPoint] = Field(default_factory=list)

    @field_validator('monthly_data')
    @classmethod
    def limit_trend_length(cls, v: list[MonthlyTrendPoint]) -> list[MonthlyTrendPoint]:
        if len(v) > 12:
            raise ValueError("Trend series covers at most 12 months")
        return v
