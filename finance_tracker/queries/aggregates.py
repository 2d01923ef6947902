"""
Aggregation Functions

Pure functions that turn repository query results into dashboard
figures. Nothing here touches storage; the executor fetches and these
functions compute, so every figure can be tested from plain lists.

All money arithmetic is Decimal.
"""

import calendar
import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Union

from finance_tracker.models.finance import (
    Budget,
    MonthlyTrendPoint,
    TimeFrame,
    Transaction,
    TransactionType,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Dashboard placeholders. Not derived from stored transactions.
BALANCE_CHANGE_PLACEHOLDER = Decimal("2.5")
_PLACEHOLDER_TREND = (
    ("Jan", 4200, 3100),
    ("Feb", 4300, 3300),
    ("Mar", 4900, 3500),
    ("Apr", 4800, 3300),
    ("May", 5100, 3600),
    ("Jun", 4900, 3400),
    ("Jul", 5240, 3590),
)

_TIME_FRAME_DAYS = {
    TimeFrame.SEVEN_DAYS: 7,
    TimeFrame.THIRTY_DAYS: 30,
    TimeFrame.NINETY_DAYS: 90,
}

_YEAR_MONTH = re.compile(r"^(\d{4})-(\d{1,2})$")


# =============================================================================
# CALENDAR HELPERS
# =============================================================================

def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """
    First and last instant of a calendar month.

    The end is the last day at end-of-day, so a range query using both
    bounds inclusively covers the whole month.
    """
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime.combine(date(year, month, last_day), time.max)
    return start, end


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def parse_year_month(value: str) -> tuple[int, int]:
    """
    Parse "YYYY-MM" into (year, month).

    Raises:
        ValueError: If the value is malformed or the month is not 1-12
    """
    match = _YEAR_MONTH.match(value.strip())
    if not match:
        raise ValueError(f"Expected a year-month like 2024-05, got: {value!r}")

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got: {month}")
    return year, month


def time_frame_start(
    time_frame: Optional[Union[str, TimeFrame]],
    now: datetime,
) -> datetime:
    """
    Resolve a time-frame shortcut to the start of its window.

    "7days", "30days" and "90days" count back from `now`; "year" starts
    on January 1 of `now`'s year. Unknown or missing values use 7 days.
    """
    try:
        frame = TimeFrame(time_frame)
    except ValueError:
        frame = TimeFrame.SEVEN_DAYS

    if frame == TimeFrame.YEAR:
        return datetime(now.year, 1, 1)
    return now - timedelta(days=_TIME_FRAME_DAYS[frame])


# =============================================================================
# TRANSACTION AGGREGATES
# =============================================================================

def total_by_type(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> Decimal:
    """Sum the amounts of every transaction of one type."""
    return sum(
        (t.amount for t in transactions if t.type == transaction_type),
        ZERO,
    )


def spent_by_category(transactions: Iterable[Transaction]) -> dict[int, Decimal]:
    """
    Expense totals grouped by category id.

    Income and uncategorised transactions are left out.
    """
    spent: dict[int, Decimal] = {}
    for transaction in transactions:
        if transaction.type != TransactionType.EXPENSE:
            continue
        if transaction.category_id is None:
            continue
        spent[transaction.category_id] = (
            spent.get(transaction.category_id, ZERO) + transaction.amount
        )
    return spent


def budget_progress(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
) -> dict[int, Decimal]:
    """Map each budget id to the expenses spent in its category (0 if none)."""
    spent = spent_by_category(transactions)
    return {budget.id: spent.get(budget.category_id, ZERO) for budget in budgets}


def percent_change(current: Decimal, previous: Decimal) -> Decimal:
    """
    Percent change from `previous` to `current`.

    Defined as exactly 0 when `previous` is 0 rather than infinite.
    """
    if previous == 0:
        return ZERO
    return (current - previous) / previous * HUNDRED


def filter_by_category(
    transactions: list[Transaction],
    category_id: Optional[Union[int, str]],
) -> list[Transaction]:
    """
    Keep transactions in one category.

    None or "all" disables the filter. Numeric strings are accepted.

    Raises:
        ValueError: If category_id is a non-numeric string
    """
    if category_id is None or category_id == "all":
        return transactions

    wanted = int(category_id)
    return [t for t in transactions if t.category_id == wanted]


def static_monthly_trend() -> list[MonthlyTrendPoint]:
    """
    The chart series shown beside the monthly summary.

    These are fixed demo figures, not a history of the user's data.
    """
    return [
        MonthlyTrendPoint(month=month, income=Decimal(income), expenses=Decimal(expenses))
        for month, income, expenses in _PLACEHOLDER_TREND
    ]
