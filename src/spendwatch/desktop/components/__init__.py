"""Reusable UI components for the desktop app."""

from .feedback import report_error, show_confirm_dialog, show_toast
from .layout import build_app_bar
from .widgets import (
    amount_tier,
    build_budget_alert,
    build_expense_card,
    build_overview_cards,
    build_stat_card,
    empty_state,
)

__all__ = [
    "amount_tier",
    "build_app_bar",
    "build_budget_alert",
    "build_expense_card",
    "build_overview_cards",
    "build_stat_card",
    "empty_state",
    "report_error",
    "show_confirm_dialog",
    "show_toast",
]
