"""Dashboard view: budget alert, overview cards, trend chart and expenses."""

from __future__ import annotations

from typing import TYPE_CHECKING

import flet as ft

from ...errors import SpendWatchError
from ...logging_config import get_logger
from ...services.dashboard import DashboardAggregator, DashboardState
from ..charts import discard_chart, spending_trend_png
from ..components import (
    build_app_bar,
    build_budget_alert,
    build_expense_card,
    build_overview_cards,
    empty_state,
    report_error,
    show_confirm_dialog,
    show_toast,
)
from ..components.dialogs import show_budget_dialog, show_expense_dialog

if TYPE_CHECKING:
    from ..context import AppContext

logger = get_logger(__name__)

RECENT_EXPENSE_LIMIT = 20


def build_dashboard_view(ctx: AppContext, page: ft.Page) -> ft.View:
    """Build the dashboard view and start its live aggregator."""

    if ctx.auth.current_identity() is None:
        page.go("/login")
        return ft.View(
            route="/dashboard",
            controls=[ft.Container(content=ft.Text("Redirecting..."), padding=20)],
            padding=0,
        )

    currency = ctx.config.CURRENCY_SYMBOL
    body = ft.Column(spacing=16, scroll=ft.ScrollMode.AUTO, expand=True)
    progress = ft.ProgressBar(visible=False)
    # Only the PNG currently on screen is kept on disk
    chart = {"path": None}

    def show_chart(points) -> ft.Image:
        previous = chart["path"]
        chart["path"] = spending_trend_png(points, currency=currency)
        discard_chart(previous)
        return ft.Image(src=str(chart["path"]), fit=ft.ImageFit.CONTAIN)

    def render(aggregator: DashboardAggregator) -> None:
        if aggregator.state is DashboardState.UNAUTHENTICATED:
            body.controls = [empty_state("Sign in to see your spending")]
            discard_chart(chart["path"])
            chart["path"] = None
            progress.visible = False
            page.update()
            return

        if aggregator.state is DashboardState.LOADING:
            body.controls = [
                ft.Container(
                    content=ft.ProgressRing(),
                    alignment=ft.alignment.center,
                    padding=40,
                )
            ]
            progress.visible = False
            page.update()
            return

        progress.visible = aggregator.state is DashboardState.REFRESHING
        summary = aggregator.summary
        controls: list[ft.Control] = []
        if summary.alert:
            controls.append(build_budget_alert(summary, currency, aggregator.threshold))
        controls.append(build_overview_cards(summary, currency))

        controls.append(
            ft.Card(
                content=ft.Container(
                    content=show_chart(aggregator.trend),
                    padding=16,
                ),
                elevation=2,
            )
        )

        controls.append(ft.Text("Recent Expenses", size=18, weight=ft.FontWeight.BOLD))
        if aggregator.expenses:
            controls.extend(
                build_expense_card(expense, currency)
                for expense in aggregator.expenses[:RECENT_EXPENSE_LIMIT]
            )
        else:
            controls.append(empty_state("No expenses recorded yet"))

        body.controls = controls
        page.update()

    def on_error(error: SpendWatchError) -> None:
        report_error(page, error, logger=logger, action="Load dashboard")

    aggregator = ctx.open_dashboard(on_update=render, on_error=on_error)

    def _open_budget(_e):
        show_budget_dialog(ctx, page)

    def _open_expense(_e):
        show_expense_dialog(ctx, page)

    def _delete_budget(_e):
        if not aggregator.summary.has_budget:
            show_toast(page, "No budget to delete")
            return

        def _confirmed():
            aggregator.delete_budget()
            if aggregator.last_error is None:
                show_toast(page, "Budget deleted")

        show_confirm_dialog(
            page,
            "Delete budget",
            "Remove your budget? Your expenses are kept.",
            on_confirm=_confirmed,
        )

    actions: list[ft.Control] = [
        ft.TextButton("Set Budget", icon=ft.Icons.SAVINGS, on_click=_open_budget),
        ft.TextButton("Add Expense", icon=ft.Icons.ADD, on_click=_open_expense),
        ft.IconButton(
            icon=ft.Icons.DELETE_OUTLINE,
            tooltip="Delete budget",
            on_click=_delete_budget,
        ),
        ft.IconButton(
            icon=ft.Icons.REFRESH,
            tooltip="Refresh",
            on_click=lambda _: aggregator.refresh(),
        ),
    ]

    view = ft.View(
        route="/dashboard",
        appbar=build_app_bar(ctx, "Dashboard", page, actions=actions),
        controls=[
            progress,
            ft.Container(content=body, padding=20, expand=True),
        ],
        padding=0,
    )

    aggregator.start()
    return view
