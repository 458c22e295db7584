"""SQLModel implementation of Budget repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...logging_config import get_logger
from ...models.budget import Budget
from ..changefeed import ChangeEvent, ChangeFeed, ChangeType
from ..database import backend_errors

logger = get_logger(__name__)

TABLE = "budget"


class SQLModelBudgetRepository:
    """SQLModel-based budget repository implementation."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        change_feed: Optional[ChangeFeed] = None,
    ):
        """Initialize with a session factory and an optional change feed."""
        self.session_factory = session_factory
        self.change_feed = change_feed

    def get_active(self, *, user_id: int) -> Optional[Budget]:
        """Return the most recently created budget for the user."""
        with backend_errors("Load budget"), self.session_factory() as session:
            statement = (
                select(Budget)
                .where(Budget.user_id == user_id)
                .order_by(Budget.created_at.desc(), Budget.id.desc())  # type: ignore[union-attr]
                .limit(1)
            )
            return session.exec(statement).first()

    def list_all(self, *, user_id: int) -> list[Budget]:
        """List all budgets, newest first."""
        with backend_errors("Load budgets"), self.session_factory() as session:
            statement = (
                select(Budget)
                .where(Budget.user_id == user_id)
                .order_by(Budget.created_at.desc(), Budget.id.desc())  # type: ignore[union-attr]
            )
            return list(session.exec(statement).all())

    def create(self, budget: Budget, *, user_id: int) -> Budget:
        """Insert a new budget; earlier budgets are left in place."""
        with backend_errors("Set budget"), self.session_factory() as session:
            budget.user_id = user_id
            session.add(budget)
            session.commit()
            session.refresh(budget)
            session.expunge(budget)
        logger.info("Budget created", extra={"budget_id": budget.id, "user_id": user_id})
        self._publish(ChangeType.INSERT, user_id, budget.id)
        return budget

    def delete(self, budget_id: int, *, user_id: int) -> bool:
        """Delete a budget by ID."""
        with backend_errors("Delete budget"), self.session_factory() as session:
            budget = session.exec(
                select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
            ).first()
            if budget is None:
                return False
            session.delete(budget)
            session.commit()
        self._publish(ChangeType.DELETE, user_id, budget_id)
        return True

    def delete_for_user(self, *, user_id: int) -> int:
        """Delete every budget owned by ``user_id``."""
        with backend_errors("Delete budget"), self.session_factory() as session:
            budgets = list(session.exec(select(Budget).where(Budget.user_id == user_id)).all())
            for budget in budgets:
                session.delete(budget)
            session.commit()
        if budgets:
            logger.info(
                "Budgets deleted", extra={"user_id": user_id, "count": len(budgets)}
            )
            self._publish(ChangeType.DELETE, user_id, None)
        return len(budgets)

    def _publish(self, change: ChangeType, user_id: int, row_id: Optional[int]) -> None:
        if self.change_feed is not None:
            self.change_feed.publish(
                ChangeEvent(table=TABLE, change=change, user_id=user_id, row_id=row_id)
            )
