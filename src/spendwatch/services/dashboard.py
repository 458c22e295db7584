"""Dashboard aggregation: spending totals, budget status and refresh loop.

The aggregator owns the view-state shown on the dashboard. Everything that can
change that state arrives as an event on one inbound queue:

* ``IdentityChanged``  - sign-in/sign-out from the auth session
* ``RowsChanged``      - a push notification from the change feed
* ``RefreshRequested`` - manual refresh
* ``BudgetDeleteRequested`` - user removed the budget

Events are drained in arrival order. Consecutive refresh-type events collapse
into a single full re-fetch, since every fetch reloads both expenses and the
active budget anyway. Each fetch replaces the previous state wholesale and the
summary (alert included) is always computed from that fetch's rows.

State machine::

    UNAUTHENTICATED -> LOADING -> READY <-> REFRESHING
    READY/REFRESHING -> UNAUTHENTICATED   (sign-out)

A failed fetch reports the error and lands in READY: with the previous rows
after a refresh, with no rows after a first load.
"""

from __future__ import annotations

import threading
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from ..config import BaseConfig
from ..domain.repositories import BudgetRepository, ExpenseRepository
from ..errors import AuthError, SpendWatchError, UnexpectedError
from ..infra.changefeed import ChangeEvent, ChangeFeed, Subscription
from ..infra.repositories.budget import TABLE as BUDGET_TABLE
from ..infra.repositories.expense import TABLE as EXPENSE_TABLE
from ..logging_config import get_logger
from ..models.budget import Budget
from ..models.expense import Expense
from .auth import AuthSession, Identity

logger = get_logger(__name__)


class DashboardState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    LOADING = "loading"
    READY = "ready"
    REFRESHING = "refreshing"


@dataclass(frozen=True, slots=True)
class DashboardSummary:
    """Aggregates displayed by the overview cards."""

    total_spent: float = 0.0
    average_daily: float = 0.0
    budget_amount: Optional[float] = None
    budget_remaining: Optional[float] = None
    alert: bool = False

    @property
    def has_budget(self) -> bool:
        return self.budget_amount is not None

    @property
    def spent_ratio(self) -> Optional[float]:
        """Share of the budget already spent, or None without a budget."""
        if not self.budget_amount:
            return None
        return self.total_spent / self.budget_amount


EMPTY_SUMMARY = DashboardSummary()


@dataclass(frozen=True, slots=True)
class ChartPoint:
    label: str
    value: float


def summarize(
    expenses: Iterable[Expense],
    budget: Optional[Budget],
    *,
    threshold: float = BaseConfig.BUDGET_ALERT_THRESHOLD,
    days: int = BaseConfig.AVERAGE_DAILY_DAYS,
) -> DashboardSummary:
    """Compute dashboard aggregates from one fetch's rows.

    ``average_daily`` always divides by ``days`` regardless of the actual date
    span. The alert fires when spending exceeds ``threshold`` of the budget.
    """
    total_spent = round(sum(float(expense.amount) for expense in expenses), 2)
    average_daily = round(total_spent / days, 2)
    if budget is None:
        return DashboardSummary(total_spent=total_spent, average_daily=average_daily)

    budget_amount = float(budget.amount)
    alert = budget_amount > 0 and total_spent / budget_amount > threshold
    return DashboardSummary(
        total_spent=total_spent,
        average_daily=average_daily,
        budget_amount=budget_amount,
        budget_remaining=round(budget_amount - total_spent, 2),
        alert=alert,
    )


def trend_points(expenses: Iterable[Expense], *, fmt: str = "%d/%m/%Y") -> list[ChartPoint]:
    """Daily spending totals in chronological order for the trend chart."""
    per_day: dict[date, float] = defaultdict(float)
    for expense in expenses:
        per_day[expense.occurred_on] += float(expense.amount)
    return [
        ChartPoint(label=day.strftime(fmt), value=round(per_day[day], 2))
        for day in sorted(per_day)
    ]


@dataclass(frozen=True, slots=True)
class IdentityChanged:
    identity: Optional[Identity]


@dataclass(frozen=True, slots=True)
class RowsChanged:
    change: ChangeEvent


@dataclass(frozen=True, slots=True)
class RefreshRequested:
    pass


@dataclass(frozen=True, slots=True)
class BudgetDeleteRequested:
    pass


DashboardEvent = Union[IdentityChanged, RowsChanged, RefreshRequested, BudgetDeleteRequested]
_REFRESH_EVENTS = (RowsChanged, RefreshRequested)


class DashboardAggregator:
    """Keeps the dashboard state in step with the signed-in user's rows."""

    def __init__(
        self,
        *,
        auth: AuthSession,
        expense_repo: ExpenseRepository,
        budget_repo: BudgetRepository,
        change_feed: ChangeFeed,
        config: Optional[BaseConfig] = None,
        on_update: Optional[Callable[["DashboardAggregator"], None]] = None,
        on_error: Optional[Callable[[SpendWatchError], None]] = None,
    ) -> None:
        cfg = config or BaseConfig
        self.auth = auth
        self.expense_repo = expense_repo
        self.budget_repo = budget_repo
        self.change_feed = change_feed
        self.threshold = cfg.BUDGET_ALERT_THRESHOLD
        self.average_days = cfg.AVERAGE_DAILY_DAYS
        self.on_update = on_update
        self.on_error = on_error

        self.state = DashboardState.UNAUTHENTICATED
        self.identity: Optional[Identity] = None
        self.expenses: list[Expense] = []
        self.budget: Optional[Budget] = None
        self.summary = EMPTY_SUMMARY
        self.last_error: Optional[SpendWatchError] = None
        self.fetch_count = 0

        self._queue: deque[DashboardEvent] = deque()
        self._drain_lock = threading.Lock()
        self._closed = False
        self._subscriptions: list[Subscription] = []
        self._unlisten: Optional[Callable[[], None]] = None

    # Lifecycle -----------------------------------------------------------

    def start(self) -> None:
        """Follow the auth session and load data for the current identity."""
        if self._unlisten is None:
            self._unlisten = self.auth.on_identity_change(
                lambda identity: self.post(IdentityChanged(identity))
            )
        self.post(IdentityChanged(self.auth.current_identity()))

    def close(self) -> None:
        """Stop listening and close the change subscriptions."""
        if self._closed:
            return
        self._closed = True
        if self._unlisten is not None:
            self._unlisten()
            self._unlisten = None
        self._close_subscriptions()
        self._queue.clear()
        logger.debug("Dashboard closed")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def trend(self) -> list[ChartPoint]:
        return trend_points(self.expenses)

    # Inbound events ------------------------------------------------------

    def post(self, event: DashboardEvent) -> None:
        """Queue an event and drain the queue unless a drain is in progress."""
        if self._closed:
            return
        self._queue.append(event)
        self._drain()

    def refresh(self) -> None:
        self.post(RefreshRequested())

    def delete_budget(self) -> None:
        self.post(BudgetDeleteRequested())

    def _drain(self) -> None:
        # Only the lock holder drains; posts from handlers or other threads
        # just queue. Re-check after release so a late post is not stranded.
        while self._queue and not self._closed:
            if not self._drain_lock.acquire(blocking=False):
                return
            try:
                while self._queue and not self._closed:
                    event = self._queue.popleft()
                    if isinstance(event, _REFRESH_EVENTS) and self._coalesce_refreshes():
                        event = RefreshRequested()
                    self._dispatch(event)
            finally:
                self._drain_lock.release()

    def _coalesce_refreshes(self) -> int:
        dropped = 0
        while self._queue and isinstance(self._queue[0], _REFRESH_EVENTS):
            self._queue.popleft()
            dropped += 1
        if dropped:
            logger.debug("Coalesced refresh events", extra={"dropped": dropped})
        return dropped

    def _dispatch(self, event: DashboardEvent) -> None:
        if isinstance(event, IdentityChanged):
            self._handle_identity(event.identity)
        elif isinstance(event, RowsChanged):
            if self.identity is None or event.change.user_id != self.identity.user_id:
                return
            self._handle_refresh()
        elif isinstance(event, RefreshRequested):
            self._handle_refresh()
        elif isinstance(event, BudgetDeleteRequested):
            self._handle_budget_delete()

    # Handlers ------------------------------------------------------------

    def _handle_identity(self, identity: Optional[Identity]) -> None:
        if identity == self.identity and (identity is None or self._subscriptions):
            return
        self._close_subscriptions()
        self.identity = identity
        if identity is None:
            self._reset()
            self.state = DashboardState.UNAUTHENTICATED
            self._notify_update()
            return

        for table in (EXPENSE_TABLE, BUDGET_TABLE):
            self._subscriptions.append(
                self.change_feed.subscribe(
                    table,
                    user_id=identity.user_id,
                    callback=lambda change: self.post(RowsChanged(change)),
                )
            )
        self._reset()
        self.state = DashboardState.LOADING
        self._notify_update()
        self._fetch()

    def _handle_refresh(self) -> None:
        if self.identity is None:
            return
        self.state = DashboardState.REFRESHING
        self._fetch()

    def _handle_budget_delete(self) -> None:
        if self.identity is None:
            self._report(AuthError("You must be signed in to do that"))
            return
        try:
            self.budget_repo.delete_for_user(user_id=self.identity.user_id)
        except SpendWatchError as exc:
            self._report(exc)
            return
        except Exception:
            logger.exception("Unexpected error deleting budget")
            self._report(UnexpectedError())
            return
        logger.info("Budget deleted from dashboard", extra={"user_id": self.identity.user_id})
        self.budget = None
        self.summary = self._summarize(self.expenses, None)
        self.last_error = None
        self._notify_update()

    def _fetch(self) -> None:
        identity = self.identity
        assert identity is not None
        first_load = self.state is DashboardState.LOADING
        try:
            expenses = self.expense_repo.list_for_user(user_id=identity.user_id)
            budget = self.budget_repo.get_active(user_id=identity.user_id)
        except SpendWatchError as exc:
            self._fetch_failed(exc, first_load)
            return
        except Exception:
            logger.exception("Unexpected error loading dashboard")
            self._fetch_failed(UnexpectedError(), first_load)
            return

        self.fetch_count += 1
        self.expenses = expenses
        self.budget = budget
        self.summary = self._summarize(expenses, budget)
        self.last_error = None
        self.state = DashboardState.READY
        logger.debug(
            "Dashboard refreshed",
            extra={
                "user_id": identity.user_id,
                "expenses": len(expenses),
                "total_spent": self.summary.total_spent,
                "alert": self.summary.alert,
            },
        )
        self._notify_update()

    def _fetch_failed(self, error: SpendWatchError, first_load: bool) -> None:
        logger.warning("Dashboard fetch failed", extra={"error": error.message})
        if first_load:
            self._reset()
        self.state = DashboardState.READY
        self._report(error)

    # Helpers -------------------------------------------------------------

    def _summarize(self, expenses: list[Expense], budget: Optional[Budget]) -> DashboardSummary:
        return summarize(expenses, budget, threshold=self.threshold, days=self.average_days)

    def _reset(self) -> None:
        self.expenses = []
        self.budget = None
        self.summary = EMPTY_SUMMARY

    def _close_subscriptions(self) -> None:
        for subscription in self._subscriptions:
            subscription.close()
        self._subscriptions = []

    def _report(self, error: SpendWatchError) -> None:
        self.last_error = error
        if self.on_error is not None:
            try:
                self.on_error(error)
            except Exception:
                logger.exception("Dashboard error handler failed")
        self._notify_update()

    def _notify_update(self) -> None:
        if self.on_update is None:
            return
        try:
            self.on_update(self)
        except Exception:
            logger.exception("Dashboard update handler failed")
