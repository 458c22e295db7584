"""Concrete repository implementations using SQLModel."""

from .budget import SQLModelBudgetRepository
from .expense import SQLModelExpenseRepository

__all__ = [
    "SQLModelBudgetRepository",
    "SQLModelExpenseRepository",
]
