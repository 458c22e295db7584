"""Flet views for the SpendWatch desktop app."""

from .auth import build_auth_view
from .dashboard import build_dashboard_view

__all__ = ["build_auth_view", "build_dashboard_view"]
