"""SQLModel table exports."""

from .budget import Budget
from .expense import Expense
from .user import User

__all__ = [
    "Budget",
    "Expense",
    "User",
]
