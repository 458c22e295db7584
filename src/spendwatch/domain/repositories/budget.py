"""Budget repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.budget import Budget


class BudgetRepository(Protocol):
    """Owner-scoped storage for budget windows."""

    def get_active(self, *, user_id: int) -> Optional[Budget]:
        """Return the most recently created budget, if any."""
        ...

    def list_all(self, *, user_id: int) -> list[Budget]:
        """List budgets newest first."""
        ...

    def create(self, budget: Budget, *, user_id: int) -> Budget:
        """Insert a budget owned by ``user_id``."""
        ...

    def delete(self, budget_id: int, *, user_id: int) -> bool:
        """Delete one budget; return False when nothing matched."""
        ...

    def delete_for_user(self, *, user_id: int) -> int:
        """Delete every budget of ``user_id`` and return the count."""
        ...
