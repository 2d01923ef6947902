"""Query execution package."""

from finance_tracker.queries.executor import FinanceQueryExecutor, QueryExecutionError

__all__ = ["FinanceQueryExecutor", "QueryExecutionError"]
