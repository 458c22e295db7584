"""Shared constants."""

from .categories import EXPENSE_CATEGORIES, ExpenseCategory

__all__ = ["EXPENSE_CATEGORIES", "ExpenseCategory"]
