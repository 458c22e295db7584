"""Pytest configuration and shared fixtures for SpendWatch tests.

Every test gets its own temp-file SQLite database, so repositories, forms and
the dashboard aggregator run against a real store without touching the
application data directory.
"""

from __future__ import annotations

import tempfile
from contextlib import contextmanager
from datetime import date
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from spendwatch.models import Budget, Expense, User  # noqa: F401
from spendwatch.infra.changefeed import ChangeFeed
from spendwatch.infra.repositories import SQLModelBudgetRepository, SQLModelExpenseRepository
from spendwatch.services.auth import AuthSession, create_user

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    # Same connect args as the app: dashboard refreshes may run on worker threads
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the application's context-manager factory."""

    @contextmanager
    def factory():
        session = Session(db_engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


@pytest.fixture
def change_feed():
    return ChangeFeed()


@pytest.fixture
def expense_repo(session_factory, change_feed):
    return SQLModelExpenseRepository(session_factory, change_feed)


@pytest.fixture
def budget_repo(session_factory, change_feed):
    return SQLModelBudgetRepository(session_factory, change_feed)


# =============================================================================
# Identity Fixtures
# =============================================================================


@pytest.fixture
def user(session_factory):
    return create_user(username="asha", password="secret123", session_factory=session_factory)


@pytest.fixture
def other_user(session_factory):
    return create_user(username="ravi", password="secret456", session_factory=session_factory)


@pytest.fixture
def auth(session_factory):
    """Auth session with nobody signed in."""
    return AuthSession(session_factory)


@pytest.fixture
def signed_in(auth, user):
    """Auth session signed in as ``user``."""
    auth.sign_in(username="asha", password="secret123")
    return auth


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def expense_factory(expense_repo):
    """Insert expenses through the repository.

    Usage:
        expense = expense_factory(user_id, amount=150.0, title="Coffee")
    """

    def _create(
        user_id: int,
        *,
        title: str = "Coffee",
        amount: float = 150.0,
        category: str = "Food",
        occurred_on: date | None = None,
    ) -> Expense:
        return expense_repo.create(
            Expense(
                user_id=user_id,
                title=title,
                amount=amount,
                category=category,
                occurred_on=occurred_on or date(2024, 3, 10),
            ),
            user_id=user_id,
        )

    return _create


@pytest.fixture
def budget_factory(budget_repo):
    """Insert budgets through the repository."""

    def _create(
        user_id: int,
        *,
        amount: float = 1000.0,
        start_date: date = date(2024, 3, 1),
        end_date: date = date(2024, 3, 31),
    ) -> Budget:
        return budget_repo.create(
            Budget(user_id=user_id, amount=amount, start_date=start_date, end_date=end_date),
            user_id=user_id,
        )

    return _create


# =============================================================================
# Application Context
# =============================================================================


@pytest.fixture
def app_config(tmp_path, monkeypatch):
    monkeypatch.setenv("SPENDWATCH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SPENDWATCH_DEV_MODE", "true")
    monkeypatch.delenv("SPENDWATCH_DATABASE_URL", raising=False)
    monkeypatch.delenv("SPENDWATCH_CURRENCY_SYMBOL", raising=False)
    from spendwatch.config import BaseConfig

    return BaseConfig()


@pytest.fixture
def app_context(app_config, session_factory, change_feed, expense_repo, budget_repo, auth):
    """AppContext wired to the per-test database."""
    from spendwatch.desktop.context import AppContext

    ctx = AppContext(
        config=app_config,
        session_factory=session_factory,
        change_feed=change_feed,
        expense_repo=expense_repo,
        budget_repo=budget_repo,
        auth=auth,
        dev_mode=True,
    )
    yield ctx
    ctx.close_dashboard()
