"""Expense repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.expense import Expense


class ExpenseRepository(Protocol):
    """Owner-scoped storage for expenses."""

    def get_by_id(self, expense_id: int, *, user_id: int) -> Optional[Expense]:
        """Retrieve an expense by ID."""
        ...

    def list_for_user(self, *, user_id: int, limit: Optional[int] = None) -> list[Expense]:
        """List expenses newest date first."""
        ...

    def create(self, expense: Expense, *, user_id: int) -> Expense:
        """Insert an expense owned by ``user_id``."""
        ...

    def delete(self, expense_id: int, *, user_id: int) -> bool:
        """Delete an expense; return False when nothing matched."""
        ...
