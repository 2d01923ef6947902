"""
Query Execution Engine

DESIGN DECISION: Dashboard figures are recomputed on every request.
The executor fetches the rows a view needs from storage and hands them
to the pure functions in ``aggregates``. Nothing is cached; the data set
is small and changes with every recorded transaction.
"""

from datetime import datetime
from typing import Optional, Union

from finance_tracker.models.finance import (
    MonthlySummary,
    TimeFrame,
    Transaction,
    TransactionType,
)
from finance_tracker.queries.aggregates import (
    BALANCE_CHANGE_PLACEHOLDER,
    ZERO,
    budget_progress,
    filter_by_category,
    month_bounds,
    parse_year_month,
    percent_change,
    previous_month,
    static_monthly_trend,
    time_frame_start,
    total_by_type,
)
from finance_tracker.services.storage import FinanceStorageInterface


class QueryExecutionError(Exception):
    """Error during query execution (bad filter input)."""
    pass


class FinanceQueryExecutor:
    """
    Executes dashboard queries against finance storage.

    GUARANTEES:
    - Only returns figures computed from stored data (plus the
      documented trend/balance-change placeholders)
    - Never mutates storage
    """

    def __init__(self, storage: FinanceStorageInterface):
        self._storage = storage

    async def budget_progress(
        self,
        user_id: int,
        year_month: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        """
        Amount spent against each of the user's budgets in one month.

        Args:
            user_id: Owner of the budgets
            year_month: "YYYY-MM"; defaults to the month of `now`
            now: Reference time (defaults to the current time)

        Returns:
            {budget_id: Decimal spent}

        Raises:
            QueryExecutionError: If year_month is malformed
        """
        now = now or datetime.now()
        if year_month:
            try:
                year, month = parse_year_month(year_month)
            except ValueError as e:
                raise QueryExecutionError(str(e)) from e
        else:
            year, month = now.year, now.month

        start, end = month_bounds(year, month)
        transactions = await self._storage.get_transactions_by_date_range(user_id, start, end)
        budgets = await self._storage.get_budgets_by_user_id(user_id)

        return budget_progress(budgets, transactions)

    async def monthly_summary(
        self,
        user_id: int,
        reference: Optional[datetime] = None,
    ) -> MonthlySummary:
        """
        Income, expenses and savings for the reference month, compared
        with the month before it, plus the total balance of all accounts.
        """
        reference = reference or datetime.now()

        current_start, current_end = month_bounds(reference.year, reference.month)
        prev_year, prev_month = previous_month(reference.year, reference.month)
        prev_start, prev_end = month_bounds(prev_year, prev_month)

        current = await self._storage.get_transactions_by_date_range(
            user_id, current_start, current_end
        )
        previous = await self._storage.get_transactions_by_date_range(
            user_id, prev_start, prev_end
        )

        current_income = total_by_type(current, TransactionType.INCOME)
        current_expenses = total_by_type(current, TransactionType.EXPENSE)
        current_savings = current_income - current_expenses

        prev_income = total_by_type(previous, TransactionType.INCOME)
        prev_expenses = total_by_type(previous, TransactionType.EXPENSE)
        prev_savings = prev_income - prev_expenses

        accounts = await self._storage.get_accounts_by_user_id(user_id)
        total_balance = sum((account.balance for account in accounts), ZERO)

        return MonthlySummary(
            total_balance=total_balance,
            balance_change=BALANCE_CHANGE_PLACEHOLDER,
            monthly_income=current_income,
            income_change=percent_change(current_income, prev_income),
            monthly_expenses=current_expenses,
            expenses_change=percent_change(current_expenses, prev_expenses),
            monthly_savings=current_savings,
            savings_change=percent_change(current_savings, prev_savings),
            monthly_data=static_monthly_trend(),
        )

    async def transaction_feed(
        self,
        user_id: int,
        time_frame: Optional[Union[str, TimeFrame]] = None,
        category_id: Optional[Union[int, str]] = None,
        now: Optional[datetime] = None,
    ) -> list[Transaction]:
        """
        Transactions from the start of a time frame up to now, newest first,
        optionally narrowed to one category.

        Raises:
            QueryExecutionError: If category_id is not numeric or "all"
        """
        now = now or datetime.now()
        start = time_frame_start(time_frame, now)

        transactions = await self._storage.get_transactions_by_date_range(user_id, start, now)

        try:
            return filter_by_category(transactions, category_id)
        except ValueError as e:
            raise QueryExecutionError(f"Invalid category filter: {category_id!r}") from e

    async def recent_transactions(self, user_id: int, limit: int) -> list[Transaction]:
        """The user's `limit` most recent transactions."""
        return await self._storage.get_recent_transactions(user_id, limit)
