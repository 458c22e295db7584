"""Route table and identity guard for the desktop app."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Optional

import flet as ft

from ..logging_config import get_logger
from .components import show_toast

if TYPE_CHECKING:
    from ..services.auth import Identity
    from .context import AppContext

logger = get_logger(__name__)

ViewBuilder = Callable[["AppContext", ft.Page], ft.View]

LOGIN_ROUTE = "/login"
HOME_ROUTE = "/dashboard"
PUBLIC_ROUTES = frozenset({LOGIN_ROUTE})


class Router:
    """Maps routes to view builders and keeps anonymous users on the login screen.

    The router also follows the auth session: when the identity disappears
    (sign-out from anywhere) the live dashboard is closed and the login view
    is shown.
    """

    def __init__(self, page: ft.Page, context: AppContext):
        self.page = page
        self.context = context
        self.routes: Dict[str, ViewBuilder] = {}
        self.current: Optional[str] = None
        self._unlisten = context.auth.on_identity_change(self._identity_changed)

    def register(self, route: str, builder: ViewBuilder) -> None:
        self.routes[route] = builder

    def resolve(self, requested: str) -> str:
        """Return the route that should actually be shown for ``requested``."""
        route = requested or "/"
        if route not in PUBLIC_ROUTES and self.context.auth.current_identity() is None:
            return LOGIN_ROUTE
        if route not in self.routes:
            logger.warning("Unknown route, showing dashboard", extra={"route": route})
            return HOME_ROUTE
        return route

    def route_change(self, e: ft.RouteChangeEvent) -> None:
        requested = e.route or "/"
        route = self.resolve(requested)
        if route != requested and route == LOGIN_ROUTE:
            logger.info("Sign-in required", extra={"route": requested})
            self.context.close_dashboard()
            self.page.go(LOGIN_ROUTE)
            return
        self._show(route)

    def view_pop(self, e: ft.ViewPopEvent) -> None:
        if len(self.page.views) > 1:
            self.page.views.pop()
        self.page.go(self.page.views[-1].route)

    def close(self) -> None:
        if self._unlisten is not None:
            self._unlisten()
            self._unlisten = None

    def _show(self, route: str) -> None:
        # Only the dashboard keeps a live aggregator
        if route in PUBLIC_ROUTES:
            self.context.close_dashboard()

        builder = self.routes.get(route)
        if builder is None:
            logger.error("No view registered", extra={"route": route})
            return

        try:
            view = builder(self.context, self.page)
        except Exception as exc:
            logger.error("View build failed", extra={"route": route}, exc_info=True)
            show_toast(self.page, f"Error loading view: {exc}", error=True)
            return

        # One view at a time; the stack never grows past the current screen
        self.page.views.clear()
        self.page.views.append(view)
        self.current = route
        self.page.update()
        logger.debug("View shown", extra={"route": route})

    def _identity_changed(self, identity: Optional[Identity]) -> None:
        if identity is None and self.current not in PUBLIC_ROUTES:
            self.context.close_dashboard()
            self.page.go(LOGIN_ROUTE)
