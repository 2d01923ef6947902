"""
Finance Tracker - Source Package

A personal-finance tracking backend: users, accounts, categories,
transactions and budgets, with monthly summaries and budget progress.

DESIGN PRINCIPLES:
1. Money is Decimal, never float
2. Stored records are immutable; only an account balance is replaced
3. Storage is injected, never global
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
