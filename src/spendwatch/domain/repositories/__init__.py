"""Repository protocol definitions for domain layer."""

from .budget import BudgetRepository
from .expense import ExpenseRepository

__all__ = [
    "BudgetRepository",
    "ExpenseRepository",
]
