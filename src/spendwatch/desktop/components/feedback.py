"""Toasts and confirmation dialogs, plus the error-to-toast boundary."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import flet as ft

from ...errors import AuthError, BackendError, SpendWatchError, UnexpectedError, ValidationError


def show_toast(page: ft.Page, message: str, *, error: bool = False) -> None:
    """Show a snack bar at the bottom of the page."""

    page.open(
        ft.SnackBar(
            content=ft.Text(message),
            bgcolor=ft.Colors.RED_400 if error else None,
        )
    )
    page.update()


def report_error(
    page: ft.Page,
    error: Exception,
    *,
    logger: logging.Logger,
    action: str,
) -> None:
    """Convert any error raised by a form or fetch into a user notification.

    Validation problems are shown as-is; auth problems also send the user to
    the sign-in screen; store failures show the store message; anything else
    is logged with its traceback and shown generically.
    """

    if isinstance(error, ValidationError):
        show_toast(page, error.message, error=True)
    elif isinstance(error, AuthError):
        show_toast(page, error.message, error=True)
        page.go("/login")
    elif isinstance(error, BackendError):
        logger.warning(f"{action} failed: {error.message}")
        show_toast(page, f"Failed to {action.lower()}: {error.message}", error=True)
    elif isinstance(error, SpendWatchError):
        show_toast(page, error.message, error=True)
    else:
        logger.error(f"Unexpected error during {action.lower()}", exc_info=error)
        show_toast(page, UnexpectedError.GENERIC_MESSAGE, error=True)


def show_confirm_dialog(
    page: ft.Page,
    title: str,
    message: str,
    on_confirm: Callable[[], None],
    on_cancel: Optional[Callable[[], None]] = None,
) -> ft.AlertDialog:
    """Show a confirmation dialog."""

    def handle_confirm(_e):
        page.close(dialog)
        on_confirm()

    def handle_cancel(_e):
        page.close(dialog)
        if on_cancel:
            on_cancel()

    dialog = ft.AlertDialog(
        modal=True,
        title=ft.Text(title),
        content=ft.Text(message),
        actions=[
            ft.TextButton("Cancel", on_click=handle_cancel),
            ft.FilledButton("Confirm", on_click=handle_confirm),
        ],
        actions_alignment=ft.MainAxisAlignment.END,
    )
    page.open(dialog)
    return dialog
