"""Set-budget dialog with typed and calendar date entry."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import TYPE_CHECKING, Callable, Optional

import flet as ft

from ....errors import ValidationError
from ....logging_config import get_logger
from ....services.date_input import DualDateInput
from ..feedback import report_error, show_toast

if TYPE_CHECKING:
    from ...context import AppContext

logger = get_logger(__name__)


def _as_datetime(value: Optional[date]) -> Optional[datetime]:
    return datetime.combine(value, time.min) if value is not None else None


def _date_row(
    page: ft.Page,
    date_input: DualDateInput,
    *,
    on_text: Callable[[str], bool],
    on_pick: Callable[[object], bool],
    after_change: Optional[Callable[[], None]] = None,
) -> tuple[ft.Row, ft.TextField, ft.DatePicker]:
    """A text field plus a calendar button bound to one ``DualDateInput``."""

    text_field = ft.TextField(
        label=date_input.label,
        value=date_input.text,
        hint_text=date_input.hint,
        expand=True,
    )

    def _on_text_change(e):
        on_text(e.control.value or "")
        text_field.error_text = date_input.error
        if after_change:
            after_change()
        page.update()

    def _on_pick(e):
        if on_pick(e.control.value):
            text_field.value = date_input.text
            text_field.error_text = None
            if after_change:
                after_change()
            page.update()

    picker = ft.DatePicker(
        first_date=_as_datetime(date_input.first_date),
        last_date=_as_datetime(date_input.last_date),
        value=_as_datetime(date_input.value),
        on_change=_on_pick,
    )
    text_field.on_change = _on_text_change

    def _open_picker(_):
        # Reopen on the current canonical value so both channels agree
        picker.value = _as_datetime(date_input.value)
        picker.first_date = _as_datetime(date_input.first_date)
        page.open(picker)

    row = ft.Row(
        [
            text_field,
            ft.IconButton(
                icon=ft.Icons.CALENDAR_MONTH,
                tooltip=f"Pick {date_input.label.lower()}",
                on_click=_open_picker,
            ),
        ],
        spacing=8,
    )
    return row, text_field, picker


def show_budget_dialog(
    ctx: AppContext,
    page: ft.Page,
    on_save_callback: Optional[Callable[[], None]] = None,
) -> ft.AlertDialog:
    """Show the set-budget dialog.

    Each date can be typed as DD/MM/YYYY or picked from a calendar; the
    end calendar starts at the chosen start date.
    """
    form = ctx.budget_form()
    form.open()

    amount_field = ft.TextField(
        label=f"Budget amount ({ctx.config.CURRENCY_SYMBOL})",
        hint_text="0.00",
        keyboard_type=ft.KeyboardType.NUMBER,
        autofocus=True,
    )

    end_row, end_field, end_picker = _date_row(
        page,
        form.end,
        on_text=form.set_end_text,
        on_pick=form.select_end,
    )

    def _sync_end_picker():
        end_picker.first_date = _as_datetime(form.end.first_date)

    start_row, start_field, _start_picker = _date_row(
        page,
        form.start,
        on_text=form.set_start_text,
        on_pick=form.select_start,
        after_change=_sync_end_picker,
    )

    fields_by_name = {
        "amount": amount_field,
        "start_date": start_field,
        "end_date": end_field,
    }

    def _submit(_):
        for control in fields_by_name.values():
            control.error_text = None
        form.amount = amount_field.value or ""
        try:
            budget = form.submit()
        except ValidationError as exc:
            target = fields_by_name.get(exc.field or "")
            if target is not None:
                target.error_text = exc.message
            report_error(page, exc, logger=logger, action="Set budget")
            return
        except Exception as exc:
            report_error(page, exc, logger=logger, action="Set budget")
            return

        logger.info("Budget saved", extra={"budget_id": budget.id})
        page.close(dialog)
        show_toast(page, "Budget set successfully")
        if on_save_callback:
            on_save_callback()

    def _close_dialog(_):
        form.close()
        page.close(dialog)

    dialog = ft.AlertDialog(
        modal=True,
        title=ft.Text("Set Budget"),
        content=ft.Container(
            content=ft.Column(
                controls=[amount_field, start_row, end_row],
                tight=True,
                spacing=12,
            ),
            width=420,
        ),
        actions=[
            ft.TextButton("Cancel", on_click=_close_dialog),
            ft.FilledButton("Set Budget", icon=ft.Icons.SAVINGS, on_click=_submit),
        ],
        actions_alignment=ft.MainAxisAlignment.END,
    )

    page.open(dialog)
    return dialog
