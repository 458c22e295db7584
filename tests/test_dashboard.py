"""Dashboard aggregation and the change-driven refresh loop."""

from __future__ import annotations

import threading
from datetime import date

import pytest

from spendwatch.errors import BackendError
from spendwatch.infra.changefeed import ChangeEvent, ChangeType
from spendwatch.models import Budget, Expense
from spendwatch.services.dashboard import (
    ChartPoint,
    DashboardAggregator,
    DashboardState,
    RowsChanged,
    summarize,
    trend_points,
)
from spendwatch.services.expense_entry import ExpenseEntryForm


def _expense(amount, day=date(2024, 3, 1)):
    return Expense(user_id=1, title="x", amount=amount, category="Food", occurred_on=day)


def _budget(amount):
    return Budget(user_id=1, amount=amount, start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))


# =============================================================================
# Pure aggregation
# =============================================================================


def test_summarize_without_budget():
    summary = summarize([_expense(100.0), _expense(50.0)], None)
    assert summary.total_spent == 150.0
    assert summary.average_daily == 5.0
    assert summary.budget_remaining is None
    assert summary.alert is False
    assert summary.has_budget is False


def test_summarize_alert_above_threshold():
    summary = summarize([_expense(850.0)], _budget(1000.0))
    assert summary.alert is True
    assert summary.budget_remaining == 150.0
    assert summary.spent_ratio == pytest.approx(0.85)


def test_summarize_exactly_at_threshold_is_not_alert():
    assert summarize([_expense(800.0)], _budget(1000.0)).alert is False


def test_summarize_overspent_goes_negative():
    summary = summarize([_expense(1200.0)], _budget(1000.0))
    assert summary.budget_remaining == -200.0
    assert summary.alert is True


def test_summarize_sums_to_cents():
    summary = summarize([_expense(0.1), _expense(0.2)], None)
    assert summary.total_spent == 0.3


def test_trend_points_daily_totals_in_date_order():
    points = trend_points(
        [
            _expense(30.0, date(2024, 3, 5)),
            _expense(20.0, date(2024, 3, 1)),
            _expense(10.0, date(2024, 3, 5)),
        ]
    )
    assert points == [
        ChartPoint(label="01/03/2024", value=20.0),
        ChartPoint(label="05/03/2024", value=40.0),
    ]


# =============================================================================
# Aggregator
# =============================================================================


@pytest.fixture
def make_dashboard(expense_repo, budget_repo, change_feed):
    created = []

    def _make(auth, **overrides):
        kwargs = dict(
            auth=auth,
            expense_repo=expense_repo,
            budget_repo=budget_repo,
            change_feed=change_feed,
        )
        kwargs.update(overrides)
        dashboard = DashboardAggregator(**kwargs)
        created.append(dashboard)
        return dashboard

    yield _make
    for dashboard in created:
        dashboard.close()


def test_unauthenticated_until_sign_in(auth, user, make_dashboard, change_feed):
    dashboard = make_dashboard(auth)
    dashboard.start()
    assert dashboard.state is DashboardState.UNAUTHENTICATED
    assert change_feed.subscriber_count() == 0

    auth.sign_in(username="asha", password="secret123")

    assert dashboard.state is DashboardState.READY
    assert dashboard.identity.user_id == user.id
    assert change_feed.subscriber_count("expense") == 1
    assert change_feed.subscriber_count("budget") == 1


def test_state_passes_through_loading(signed_in, make_dashboard):
    states = []
    dashboard = make_dashboard(signed_in, on_update=lambda d: states.append(d.state))
    dashboard.start()
    assert states == [DashboardState.LOADING, DashboardState.READY]


def test_new_expense_refreshes_total(signed_in, make_dashboard, expense_repo, user):
    dashboard = make_dashboard(signed_in)
    dashboard.start()
    before = dashboard.summary.total_spent

    form = ExpenseEntryForm(auth=signed_in, repository=expense_repo)
    form.open()
    form.title, form.amount, form.category = "Coffee", "150", "Food"
    form.submit()

    assert dashboard.summary.total_spent == before + 150
    assert [e.title for e in dashboard.expenses] == ["Coffee"]
    assert dashboard.state is DashboardState.READY


def test_budget_alert_and_remaining(signed_in, user, make_dashboard, expense_factory, budget_factory):
    budget_factory(user.id, amount=1000.0)
    expense_factory(user.id, amount=850.0)
    dashboard = make_dashboard(signed_in)
    dashboard.start()

    assert dashboard.summary.alert is True
    assert dashboard.summary.budget_remaining == 150.0


def test_alert_follows_latest_fetch(signed_in, user, make_dashboard, expense_factory, budget_factory):
    budget_factory(user.id, amount=1000.0)
    expense_factory(user.id, amount=700.0)
    dashboard = make_dashboard(signed_in)
    dashboard.start()
    assert dashboard.summary.alert is False

    expense_factory(user.id, amount=150.0)
    assert dashboard.summary.alert is True

    budget_factory(user.id, amount=5000.0)
    assert dashboard.summary.alert is False
    assert dashboard.summary.budget_remaining == 4150.0


def test_delete_budget_clears_alert_and_keeps_expenses(
    signed_in, user, make_dashboard, expense_factory, budget_factory, budget_repo
):
    budget_factory(user.id, amount=1000.0)
    expense_factory(user.id, amount=850.0)
    dashboard = make_dashboard(signed_in)
    dashboard.start()

    dashboard.delete_budget()

    assert dashboard.budget is None
    assert dashboard.summary.alert is False
    assert dashboard.summary.budget_remaining is None
    assert dashboard.summary.total_spent == 850.0
    assert budget_repo.get_active(user_id=user.id) is None

    dashboard.refresh()
    assert dashboard.budget is None


def test_sign_out_closes_subscriptions(signed_in, make_dashboard, change_feed, expense_factory, user):
    expense_factory(user.id)
    dashboard = make_dashboard(signed_in)
    dashboard.start()

    signed_in.sign_out()

    assert dashboard.state is DashboardState.UNAUTHENTICATED
    assert dashboard.expenses == []
    assert dashboard.summary.total_spent == 0.0
    assert change_feed.subscriber_count() == 0


def test_close_releases_everything(signed_in, make_dashboard, change_feed, expense_factory, user):
    dashboard = make_dashboard(signed_in)
    dashboard.start()
    fetches = dashboard.fetch_count

    dashboard.close()
    expense_factory(user.id)

    assert dashboard.closed
    assert change_feed.subscriber_count() == 0
    assert dashboard.fetch_count == fetches


def test_other_users_changes_are_ignored(
    signed_in, make_dashboard, expense_factory, other_user, change_feed
):
    dashboard = make_dashboard(signed_in)
    dashboard.start()
    fetches = dashboard.fetch_count

    expense_factory(other_user.id, amount=999.0)
    dashboard.post(
        RowsChanged(ChangeEvent(table="expense", change=ChangeType.INSERT, user_id=other_user.id))
    )

    assert dashboard.fetch_count == fetches
    assert dashboard.summary.total_spent == 0.0


def test_burst_of_changes_coalesced_into_one_fetch(signed_in, user, make_dashboard, expense_factory):
    burst = {"done": False}

    def on_update(dashboard):
        # Insert while the queue is draining so the events pile up
        if dashboard.state is DashboardState.READY and not burst["done"]:
            burst["done"] = True
            for amount in (10.0, 20.0, 30.0):
                expense_factory(user.id, amount=amount)

    dashboard = make_dashboard(signed_in, on_update=on_update)
    dashboard.start()

    assert dashboard.fetch_count == 2
    assert dashboard.summary.total_spent == 60.0


class _FlakyExpenseRepo:
    def __init__(self, inner):
        self.inner = inner
        self.fail = False

    def list_for_user(self, *, user_id, limit=None):
        if self.fail:
            raise BackendError("Load expenses failed: offline")
        return self.inner.list_for_user(user_id=user_id, limit=limit)


def test_first_load_failure_lands_ready_and_empty(signed_in, user, make_dashboard, expense_repo, expense_factory):
    expense_factory(user.id)
    flaky = _FlakyExpenseRepo(expense_repo)
    flaky.fail = True
    errors = []
    dashboard = make_dashboard(signed_in, expense_repo=flaky, on_error=errors.append)

    dashboard.start()

    assert dashboard.state is DashboardState.READY
    assert dashboard.expenses == []
    assert [e.message for e in errors] == ["Load expenses failed: offline"]
    assert dashboard.last_error is errors[0]


def test_refresh_failure_keeps_stale_data(signed_in, user, make_dashboard, expense_repo, expense_factory):
    expense_factory(user.id, amount=150.0)
    flaky = _FlakyExpenseRepo(expense_repo)
    errors = []
    dashboard = make_dashboard(signed_in, expense_repo=flaky, on_error=errors.append)
    dashboard.start()

    flaky.fail = True
    dashboard.refresh()

    assert dashboard.state is DashboardState.READY
    assert dashboard.summary.total_spent == 150.0
    assert len(errors) == 1

    flaky.fail = False
    dashboard.refresh()
    assert dashboard.last_error is None


def test_failing_update_handler_does_not_break_refresh(signed_in, user, make_dashboard, expense_factory):
    def on_update(_dashboard):
        raise RuntimeError("render failed")

    dashboard = make_dashboard(signed_in, on_update=on_update)
    dashboard.start()
    expense_factory(user.id, amount=40.0)

    assert dashboard.summary.total_spent == 40.0


class _PostingExpenseRepo:
    """Posts a refresh from another thread while a fetch is in progress."""

    def __init__(self, inner):
        self.inner = inner
        self.dashboard = None
        self.calls = 0

    def list_for_user(self, *, user_id, limit=None):
        self.calls += 1
        if self.calls == 1:
            worker = threading.Thread(target=self.dashboard.refresh)
            worker.start()
            worker.join(timeout=5)
        return self.inner.list_for_user(user_id=user_id, limit=limit)


def test_post_from_worker_thread_during_fetch_is_dispatched(
    signed_in, user, make_dashboard, expense_repo, expense_factory
):
    expense_factory(user.id, amount=150.0)
    repo = _PostingExpenseRepo(expense_repo)
    dashboard = make_dashboard(signed_in, expense_repo=repo)
    repo.dashboard = dashboard

    dashboard.start()

    assert repo.calls == 2
    assert dashboard.fetch_count == 2
    assert dashboard.state is DashboardState.READY


def test_concurrent_posts_leave_nothing_queued(signed_in, user, make_dashboard, expense_factory):
    dashboard = make_dashboard(signed_in)
    dashboard.start()

    def hammer():
        for _ in range(25):
            dashboard.refresh()

    workers = [threading.Thread(target=hammer) for _ in range(3)]
    for worker in workers:
        worker.start()
    expense_factory(user.id, amount=75.0)
    for worker in workers:
        worker.join(timeout=10)
    dashboard.refresh()

    assert list(dashboard._queue) == []
    assert dashboard.state is DashboardState.READY
    assert dashboard.summary.total_spent == 75.0


class _FailingDeleteBudgetRepo:
    def __init__(self, inner):
        self.inner = inner

    def get_active(self, *, user_id):
        return self.inner.get_active(user_id=user_id)

    def delete_for_user(self, *, user_id):
        raise BackendError("Delete budget failed: database is locked")


def test_failed_budget_delete_keeps_budget_and_reports(
    signed_in, user, make_dashboard, budget_repo, budget_factory, expense_factory
):
    budget_factory(user.id, amount=1000.0)
    expense_factory(user.id, amount=850.0)
    errors = []
    dashboard = make_dashboard(
        signed_in, budget_repo=_FailingDeleteBudgetRepo(budget_repo), on_error=errors.append
    )
    dashboard.start()

    dashboard.delete_budget()

    assert dashboard.last_error is errors[0]
    assert errors[0].message == "Delete budget failed: database is locked"
    assert dashboard.budget is not None
    assert dashboard.summary.alert is True
    assert dashboard.summary.budget_remaining == 150.0
    assert budget_repo.get_active(user_id=user.id) is not None


def test_three_expenses_totalling_850_against_1000_budget(
    signed_in, user, make_dashboard, expense_factory, budget_factory
):
    budget_factory(user.id, amount=1000.0)
    dashboard = make_dashboard(signed_in)
    dashboard.start()

    for title, amount in (("Groceries", 400.0), ("Cab", 250.0), ("Movie", 200.0)):
        expense_factory(user.id, title=title, amount=amount)

    assert dashboard.summary.total_spent == 850.0
    assert dashboard.summary.budget_remaining == 150.0
    assert dashboard.summary.alert is True
    assert dashboard.summary.average_daily == pytest.approx(28.33)
    assert len(dashboard.expenses) == 3
