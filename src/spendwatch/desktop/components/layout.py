"""Layout components for the desktop app."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import flet as ft

if TYPE_CHECKING:
    from ..context import AppContext


def build_app_bar(
    ctx: AppContext,
    title: str,
    page: ft.Page,
    actions: Optional[List[ft.Control]] = None,
) -> ft.AppBar:
    """Build the app bar with view actions, the signed-in user and sign-out."""

    def _sign_out(_e):
        ctx.close_dashboard()
        ctx.auth.sign_out()
        page.go("/login")

    bar_actions: List[ft.Control] = list(actions or [])
    identity = ctx.auth.current_identity()
    if identity is not None:
        bar_actions.extend([
            ft.Chip(
                label=ft.Text(identity.label),
                leading=ft.Icon(ft.Icons.PERSON),
            ),
            ft.IconButton(
                icon=ft.Icons.LOGOUT,
                tooltip="Sign out",
                on_click=_sign_out,
            ),
        ])

    return ft.AppBar(
        leading=ft.Icon(ft.Icons.ACCOUNT_BALANCE_WALLET),
        title=ft.Text(title, size=20, weight=ft.FontWeight.BOLD),
        center_title=False,
        bgcolor=ft.Colors.SURFACE_CONTAINER_HIGHEST,
        actions=bar_actions,
    )
