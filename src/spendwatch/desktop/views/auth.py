"""Authentication view: sign in or create an account."""

from __future__ import annotations

from typing import TYPE_CHECKING

import flet as ft

from ...errors import AuthError, ValidationError
from ...logging_config import get_logger
from ..components import report_error, show_toast

if TYPE_CHECKING:  # pragma: no cover
    from ..context import AppContext

logger = get_logger(__name__)


def build_auth_view(ctx: AppContext, page: ft.Page) -> ft.View:
    """Build login view with username and password fields."""

    # If already signed in, redirect to dashboard
    if ctx.auth.current_identity() is not None:
        page.go("/dashboard")
        return ft.View(
            route="/login",
            controls=[ft.Container(content=ft.Text("Redirecting..."), padding=20)],
            padding=0,
        )

    mode = {"sign_up": False}

    username_field = ft.TextField(
        label="Username",
        hint_text="Enter username",
        autofocus=True,
        width=300,
    )
    display_name_field = ft.TextField(
        label="Display name",
        hint_text="Optional",
        width=300,
        visible=False,
    )
    password_field = ft.TextField(
        label="Password",
        hint_text="Enter password",
        password=True,
        can_reveal_password=True,
        width=300,
    )
    error_text = ft.Text("", color=ft.Colors.ERROR, visible=False)
    subtitle = ft.Text(
        "Sign in to continue",
        size=16,
        color=ft.Colors.ON_SURFACE_VARIANT,
        text_align=ft.TextAlign.CENTER,
    )
    submit_button = ft.FilledButton("Sign In", width=300)
    toggle_button = ft.TextButton("New here? Create an account")

    def _show_error(message: str) -> None:
        error_text.value = message
        error_text.visible = True
        page.update()

    def do_submit(_e):
        error_text.visible = False
        username = username_field.value or ""
        password = password_field.value or ""

        if not username.strip() or not password:
            _show_error("Username and password are required")
            return

        try:
            if mode["sign_up"]:
                identity = ctx.auth.sign_up(
                    username=username,
                    password=password,
                    display_name=display_name_field.value or "",
                )
            else:
                identity = ctx.auth.sign_in(username=username, password=password)
        except (AuthError, ValidationError) as exc:
            _show_error(exc.message)
            return
        except Exception as exc:
            report_error(page, exc, logger=logger, action="Sign in")
            return

        show_toast(page, f"Welcome, {identity.label}!")
        page.go("/dashboard")

    def toggle_mode(_e):
        mode["sign_up"] = not mode["sign_up"]
        signing_up = mode["sign_up"]
        display_name_field.visible = signing_up
        subtitle.value = "Create your account" if signing_up else "Sign in to continue"
        submit_button.text = "Create Account" if signing_up else "Sign In"
        toggle_button.text = (
            "Already have an account? Sign in" if signing_up else "New here? Create an account"
        )
        error_text.visible = False
        page.update()

    submit_button.on_click = do_submit
    toggle_button.on_click = toggle_mode
    username_field.on_submit = lambda _: password_field.focus()
    password_field.on_submit = do_submit

    return ft.View(
        route="/login",
        controls=[
            ft.Container(
                content=ft.Column(
                    controls=[
                        ft.Container(
                            content=ft.Icon(
                                ft.Icons.ACCOUNT_BALANCE_WALLET,
                                size=64,
                                color=ft.Colors.PRIMARY,
                            ),
                            alignment=ft.alignment.center,
                        ),
                        ft.Text(
                            ctx.config.APP_NAME,
                            size=32,
                            weight=ft.FontWeight.BOLD,
                            text_align=ft.TextAlign.CENTER,
                        ),
                        subtitle,
                        ft.Container(height=32),
                        username_field,
                        display_name_field,
                        password_field,
                        error_text,
                        ft.Container(height=16),
                        submit_button,
                        toggle_button,
                    ],
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                    spacing=8,
                ),
                alignment=ft.alignment.center,
                expand=True,
            )
        ],
        padding=20,
    )
