"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from sqlmodel import Session

from ..config import BaseConfig
from ..errors import SpendWatchError
from ..infra.changefeed import ChangeFeed
from ..infra.database import create_db_engine, create_session_factory, init_database
from ..infra.repositories import SQLModelBudgetRepository, SQLModelExpenseRepository
from ..services.auth import AuthSession
from ..services.budget_entry import BudgetEntryForm
from ..services.dashboard import DashboardAggregator
from ..services.expense_entry import ExpenseEntryForm

if TYPE_CHECKING:  # pragma: no cover
    import flet as ft


@dataclass
class AppContext:
    """Everything a view, dialog or command needs, built once at startup."""

    # Configuration
    config: BaseConfig

    # Session factory
    session_factory: Callable[[], Session]

    # Store and change notifications
    change_feed: ChangeFeed
    expense_repo: SQLModelExpenseRepository
    budget_repo: SQLModelBudgetRepository

    # Who is signed in
    auth: AuthSession

    # Page reference (set after initialization)
    page: Optional["ft.Page"] = None
    dev_mode: bool = False

    # Live dashboard, at most one per context
    dashboard: Optional[DashboardAggregator] = None

    def expense_form(self) -> ExpenseEntryForm:
        return ExpenseEntryForm(auth=self.auth, repository=self.expense_repo)

    def budget_form(self) -> BudgetEntryForm:
        return BudgetEntryForm(auth=self.auth, repository=self.budget_repo, config=self.config)

    def open_dashboard(
        self,
        *,
        on_update: Optional[Callable[[DashboardAggregator], None]] = None,
        on_error: Optional[Callable[[SpendWatchError], None]] = None,
    ) -> DashboardAggregator:
        """Replace any live dashboard with a fresh one (not yet started)."""
        self.close_dashboard()
        self.dashboard = DashboardAggregator(
            auth=self.auth,
            expense_repo=self.expense_repo,
            budget_repo=self.budget_repo,
            change_feed=self.change_feed,
            config=self.config,
            on_update=on_update,
            on_error=on_error,
        )
        return self.dashboard

    def close_dashboard(self) -> None:
        if self.dashboard is not None:
            self.dashboard.close()
            self.dashboard = None


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create and initialize the application context."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    change_feed = ChangeFeed()

    return AppContext(
        config=config,
        dev_mode=config.DEV_MODE,
        session_factory=session_factory,
        change_feed=change_feed,
        expense_repo=SQLModelExpenseRepository(session_factory, change_feed),
        budget_repo=SQLModelBudgetRepository(session_factory, change_feed),
        auth=AuthSession(session_factory),
    )
