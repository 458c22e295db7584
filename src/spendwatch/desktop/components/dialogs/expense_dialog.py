"""Add-expense dialog wrapping ``ExpenseEntryForm``."""

from __future__ import annotations

from datetime import datetime, time
from typing import TYPE_CHECKING, Callable, Optional

import flet as ft

from ....constants.categories import EXPENSE_CATEGORIES
from ....errors import ValidationError
from ....logging_config import get_logger
from ..feedback import report_error, show_toast

if TYPE_CHECKING:
    from ...context import AppContext

logger = get_logger(__name__)


def show_expense_dialog(
    ctx: AppContext,
    page: ft.Page,
    on_save_callback: Optional[Callable[[], None]] = None,
) -> ft.AlertDialog:
    """Show the add-expense dialog.

    Args:
        ctx: Application context
        page: Flet page
        on_save_callback: Optional callback after a successful save
    """
    form = ctx.expense_form()
    form.open()

    title_field = ft.TextField(
        label="Title",
        hint_text="Expense title",
        autofocus=True,
        width=400,
    )
    amount_field = ft.TextField(
        label=f"Amount ({ctx.config.CURRENCY_SYMBOL})",
        hint_text="0.00",
        keyboard_type=ft.KeyboardType.NUMBER,
        width=400,
    )
    category_dropdown = ft.Dropdown(
        label="Category",
        hint_text="Select category",
        options=[ft.dropdown.Option(key=name, text=name) for name in EXPENSE_CATEGORIES],
        width=400,
    )
    date_button = ft.OutlinedButton(
        text=form.occurred_on.strftime("%d %B %Y") if form.occurred_on else "Pick a date",
        icon=ft.Icons.CALENDAR_MONTH,
        width=400,
    )
    fields_by_name = {
        "title": title_field,
        "amount": amount_field,
        "category": category_dropdown,
    }

    def _on_date_picked(e):
        picked = e.control.value
        if picked is not None:
            form.occurred_on = picked.date() if isinstance(picked, datetime) else picked
            date_button.text = form.occurred_on.strftime("%d %B %Y")
            page.update()

    date_picker = ft.DatePicker(
        first_date=datetime.combine(ctx.config.CALENDAR_FIRST_DATE, time.min),
        last_date=datetime.combine(ctx.config.calendar_last_date(), time.min),
        value=datetime.combine(form.occurred_on, time.min) if form.occurred_on else None,
        on_change=_on_date_picked,
    )
    date_button.on_click = lambda _: page.open(date_picker)

    def _clear_errors():
        for control in fields_by_name.values():
            control.error_text = None

    def _submit(_):
        _clear_errors()
        form.title = title_field.value or ""
        form.amount = amount_field.value or ""
        form.category = category_dropdown.value or ""
        try:
            expense = form.submit()
        except ValidationError as exc:
            target = fields_by_name.get(exc.field or "")
            if target is not None:
                target.error_text = exc.message
            report_error(page, exc, logger=logger, action="Add expense")
            return
        except Exception as exc:
            # Fields stay populated so the user can retry
            report_error(page, exc, logger=logger, action="Add expense")
            return

        logger.info("Expense saved", extra={"expense_id": expense.id})
        page.close(dialog)
        show_toast(page, "Expense added successfully")
        if on_save_callback:
            on_save_callback()

    def _close_dialog(_):
        form.close()
        page.close(dialog)

    dialog = ft.AlertDialog(
        modal=True,
        title=ft.Text("Add New Expense"),
        content=ft.Container(
            content=ft.Column(
                controls=[title_field, amount_field, category_dropdown, date_button],
                tight=True,
                spacing=12,
            ),
            width=420,
        ),
        actions=[
            ft.TextButton("Cancel", on_click=_close_dialog),
            ft.FilledButton("Add Expense", icon=ft.Icons.ADD, on_click=_submit),
        ],
        actions_alignment=ft.MainAxisAlignment.END,
    )

    page.open(dialog)
    return dialog
