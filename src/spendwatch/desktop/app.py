"""flet entry point: builds the context, wires routes and opens the login screen."""

from __future__ import annotations

import flet as ft

from ..logging_config import setup_logging
from .context import AppContext, create_app_context
from .navigation import LOGIN_ROUTE, Router
from .views.auth import build_auth_view
from .views.dashboard import build_dashboard_view

ROUTES = {
    LOGIN_ROUTE: build_auth_view,
    "/dashboard": build_dashboard_view,
    "/": build_dashboard_view,
}


def configure_page(page: ft.Page, ctx: AppContext) -> None:
    """Window size, title and theme."""
    page.title = f"{ctx.config.APP_NAME} (DEV)" if ctx.dev_mode else ctx.config.APP_NAME
    page.theme_mode = ft.ThemeMode.LIGHT
    page.theme = ft.Theme(color_scheme_seed=ft.Colors.DEEP_PURPLE)
    page.padding = 0
    page.window.width = 1200
    page.window.height = 800
    page.window.min_width = 900
    page.window.min_height = 600


def main(page: ft.Page) -> None:
    ctx = create_app_context()
    logger = setup_logging(ctx.config)
    logger.info("Desktop app starting", extra={"database": ctx.config.DATABASE_URL})

    ctx.page = page
    configure_page(page, ctx)

    router = Router(page, ctx)
    for route, builder in ROUTES.items():
        router.register(route, builder)
    page.on_route_change = router.route_change
    page.on_view_pop = router.view_pop

    def _shutdown(_):
        logger.info("Desktop app closing")
        ctx.close_dashboard()
        router.close()

    def _page_error(e: ft.ControlEvent):  # pragma: no cover (UI callback)
        logger.error("Flet page error", extra={"data": getattr(e, "data", None)})

    page.on_close = _shutdown
    page.on_error = _page_error

    page.go(LOGIN_ROUTE)


def run() -> None:
    ft.app(target=main)


if __name__ == "__main__":
    run()
