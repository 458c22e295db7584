"""Dialog components for SpendWatch desktop app."""

from .budget_dialog import show_budget_dialog
from .expense_dialog import show_expense_dialog

__all__ = [
    "show_budget_dialog",
    "show_expense_dialog",
]
