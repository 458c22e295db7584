"""Reusable widget components for the desktop app."""

from __future__ import annotations

from typing import Optional

import flet as ft

from ...formatting import format_money
from ...models.expense import Expense
from ...services.dashboard import DashboardSummary

# Expense cards are tinted by how large the spend is
LOW_AMOUNT_LIMIT = 1000
MEDIUM_AMOUNT_LIMIT = 5000
AMOUNT_TIER_COLORS = {
    "low": ft.Colors.GREEN_400,
    "medium": ft.Colors.AMBER_700,
    "high": ft.Colors.RED_400,
}


def amount_tier(amount: float) -> str:
    if amount < LOW_AMOUNT_LIMIT:
        return "low"
    if amount < MEDIUM_AMOUNT_LIMIT:
        return "medium"
    return "high"


def build_stat_card(
    label: str,
    value: str,
    icon: Optional[str] = None,
    color: Optional[str] = None,
    subtitle: Optional[str] = None,
) -> ft.Card:
    """Build a statistic card."""

    content_column = ft.Column(
        [
            ft.Text(label, size=14, color=ft.Colors.ON_SURFACE_VARIANT),
            ft.Text(value, size=28, weight=ft.FontWeight.BOLD, color=color),
        ],
        spacing=4,
        horizontal_alignment=ft.CrossAxisAlignment.START,
    )
    if subtitle:
        content_column.controls.append(
            ft.Text(subtitle, size=12, color=ft.Colors.ON_SURFACE_VARIANT)
        )

    card_content: ft.Control = content_column
    if icon:
        card_content = ft.Row(
            [
                ft.Icon(icon, size=36, color=color or ft.Colors.PRIMARY),
                ft.Container(width=12),
                content_column,
            ],
            alignment=ft.MainAxisAlignment.START,
        )

    return ft.Card(content=ft.Container(content=card_content, padding=20), elevation=2)


def build_overview_cards(summary: DashboardSummary, currency: str) -> ft.ResponsiveRow:
    """Total spent, average daily and budget-left cards."""

    if summary.has_budget:
        remaining = format_money(summary.budget_remaining or 0.0, currency)
        remaining_color = (
            ft.Colors.RED_400 if (summary.budget_remaining or 0.0) < 0 else ft.Colors.GREEN_400
        )
        budget_subtitle = f"From {format_money(summary.budget_amount or 0.0, currency)}"
    else:
        remaining = format_money(0, currency)
        remaining_color = ft.Colors.ON_SURFACE_VARIANT
        budget_subtitle = "No budget set"

    cards = [
        build_stat_card(
            "Total Spent",
            format_money(summary.total_spent, currency),
            icon=ft.Icons.PAYMENTS,
            color=ft.Colors.PRIMARY,
            subtitle="All recorded expenses",
        ),
        build_stat_card(
            "Average Daily",
            format_money(summary.average_daily, currency, decimals=2),
            icon=ft.Icons.CALENDAR_TODAY,
            color=ft.Colors.BLUE,
            subtitle="Last 30 days",
        ),
        build_stat_card(
            "Budget Left",
            remaining,
            icon=ft.Icons.SAVINGS,
            color=remaining_color,
            subtitle=budget_subtitle,
        ),
    ]
    return ft.ResponsiveRow(
        controls=[ft.Container(content=card, col={"sm": 12, "md": 4}) for card in cards],
        spacing=16,
        run_spacing=16,
    )


def build_budget_alert(
    summary: DashboardSummary, currency: str, threshold: float = 0.8
) -> ft.Container:
    """Warning strip shown while spending is above the alert threshold."""

    return ft.Container(
        content=ft.Row(
            [
                ft.Icon(ft.Icons.WARNING_AMBER, color=ft.Colors.ON_ERROR_CONTAINER),
                ft.Text(
                    f"Warning: You have spent more than {threshold:.0%} of your budget "
                    f"({format_money(summary.budget_amount or 0.0, currency)})",
                    color=ft.Colors.ON_ERROR_CONTAINER,
                    weight=ft.FontWeight.BOLD,
                ),
            ],
            spacing=12,
        ),
        bgcolor=ft.Colors.ERROR_CONTAINER,
        border_radius=8,
        padding=16,
    )


def build_expense_card(expense: Expense, currency: str) -> ft.Card:
    """One recorded expense: title and category left, amount and date right."""

    tier_color = AMOUNT_TIER_COLORS[amount_tier(expense.amount)]
    return ft.Card(
        content=ft.Container(
            content=ft.Row(
                [
                    ft.Row(
                        [
                            ft.CircleAvatar(
                                content=ft.Icon(ft.Icons.RECEIPT_LONG, size=20),
                                radius=20,
                            ),
                            ft.Column(
                                [
                                    ft.Text(expense.title, weight=ft.FontWeight.W_500),
                                    ft.Text(
                                        expense.category,
                                        size=12,
                                        color=ft.Colors.ON_SURFACE_VARIANT,
                                    ),
                                ],
                                spacing=2,
                            ),
                        ],
                        spacing=16,
                    ),
                    ft.Column(
                        [
                            ft.Text(
                                format_money(expense.amount, currency),
                                size=18,
                                weight=ft.FontWeight.BOLD,
                                color=tier_color,
                            ),
                            ft.Text(
                                expense.occurred_on.strftime("%d/%m/%Y"),
                                size=12,
                                color=ft.Colors.ON_SURFACE_VARIANT,
                            ),
                        ],
                        spacing=2,
                        horizontal_alignment=ft.CrossAxisAlignment.END,
                    ),
                ],
                alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
            ),
            padding=16,
        ),
        elevation=1,
    )


def empty_state(message: str) -> ft.Container:
    """Simple empty-state placeholder."""

    return ft.Container(
        content=ft.Column(
            [
                ft.Icon(ft.Icons.INBOX, size=40, color=ft.Colors.ON_SURFACE_VARIANT),
                ft.Text(message, color=ft.Colors.ON_SURFACE_VARIANT),
            ],
            alignment=ft.MainAxisAlignment.CENTER,
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
        ),
        padding=20,
    )
