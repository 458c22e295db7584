"""SQLModel implementation of Expense repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...logging_config import get_logger
from ...models.expense import Expense
from ..changefeed import ChangeEvent, ChangeFeed, ChangeType
from ..database import backend_errors

logger = get_logger(__name__)

TABLE = "expense"


class SQLModelExpenseRepository:
    """SQLModel-based expense repository implementation."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        change_feed: Optional[ChangeFeed] = None,
    ):
        """Initialize with a session factory and an optional change feed."""
        self.session_factory = session_factory
        self.change_feed = change_feed

    def get_by_id(self, expense_id: int, *, user_id: int) -> Optional[Expense]:
        """Retrieve an expense by ID."""
        with backend_errors("Load expense"), self.session_factory() as session:
            statement = select(Expense).where(
                Expense.id == expense_id, Expense.user_id == user_id
            )
            return session.exec(statement).first()

    def list_for_user(self, *, user_id: int, limit: Optional[int] = None) -> list[Expense]:
        """List expenses ordered by date descending (newest id first within a day)."""
        with backend_errors("Load expenses"), self.session_factory() as session:
            statement = (
                select(Expense)
                .where(Expense.user_id == user_id)
                .order_by(Expense.occurred_on.desc(), Expense.id.desc())  # type: ignore[union-attr]
            )
            if limit is not None:
                statement = statement.limit(limit)
            return list(session.exec(statement).all())

    def create(self, expense: Expense, *, user_id: int) -> Expense:
        """Insert a new expense owned by ``user_id``."""
        with backend_errors("Add expense"), self.session_factory() as session:
            expense.user_id = user_id
            session.add(expense)
            session.commit()
            session.refresh(expense)
            session.expunge(expense)
        logger.info("Expense created", extra={"expense_id": expense.id, "user_id": user_id})
        self._publish(ChangeType.INSERT, user_id, expense.id)
        return expense

    def delete(self, expense_id: int, *, user_id: int) -> bool:
        """Delete an expense by ID."""
        with backend_errors("Delete expense"), self.session_factory() as session:
            expense = session.exec(
                select(Expense).where(Expense.id == expense_id, Expense.user_id == user_id)
            ).first()
            if expense is None:
                return False
            session.delete(expense)
            session.commit()
        self._publish(ChangeType.DELETE, user_id, expense_id)
        return True

    def _publish(self, change: ChangeType, user_id: int, row_id: Optional[int]) -> None:
        if self.change_feed is not None:
            self.change_feed.publish(
                ChangeEvent(table=TABLE, change=change, user_id=user_id, row_id=row_id)
            )
