from __future__ import annotations

from datetime import date

import pytest

from spendwatch.errors import AuthError, ValidationError
from spendwatch.services.budget_entry import BudgetEntryForm


@pytest.fixture
def make_form(budget_repo):
    def _make(auth):
        form = BudgetEntryForm(auth=auth, repository=budget_repo, today=lambda: date(2024, 3, 1))
        form.open()
        return form

    return _make


def test_defaults_to_today(signed_in, make_form):
    form = make_form(signed_in)
    assert form.start.value == date(2024, 3, 1)
    assert form.end.text == "01/03/2024"


def test_submit_typed_dates(signed_in, make_form, budget_repo, user):
    form = make_form(signed_in)
    form.amount = "1000"
    form.set_start_text("01/03/2024")
    form.set_end_text("31/03/2024")

    budget = form.submit()

    assert budget.amount == 1000.0
    assert (budget.start_date, budget.end_date) == (date(2024, 3, 1), date(2024, 3, 31))
    assert budget_repo.get_active(user_id=user.id).id == budget.id
    assert form.amount == ""
    assert form.is_open is False


def test_submit_calendar_dates(signed_in, make_form):
    form = make_form(signed_in)
    form.amount = "2500.75"
    assert form.select_start(date(2024, 4, 1))
    assert form.select_end(date(2024, 4, 30))
    assert form.start.text == "01/04/2024"

    budget = form.submit()
    assert budget.amount == 2500.75
    assert budget.end_date == date(2024, 4, 30)


def test_end_calendar_starts_at_start_date(signed_in, make_form):
    form = make_form(signed_in)
    form.select_start(date(2024, 5, 10))
    assert form.end.first_date == date(2024, 5, 10)
    assert form.select_end(date(2024, 5, 9)) is False


def test_start_after_end_rejected_without_insert(signed_in, make_form, budget_repo, user):
    form = make_form(signed_in)
    form.amount = "500"
    form.set_start_text("10/03/2024")
    form.set_end_text("01/03/2024")

    with pytest.raises(ValidationError, match="Start date cannot be after end date"):
        form.submit()
    assert budget_repo.list_all(user_id=user.id) == []


def test_unparsable_text_never_submits_stale_value(signed_in, make_form, budget_repo, user):
    form = make_form(signed_in)
    form.amount = "500"
    form.set_end_text("31-03-2024")

    assert form.end.value == date(2024, 3, 1)
    with pytest.raises(ValidationError) as excinfo:
        form.submit()
    assert excinfo.value.field == "end_date"
    assert budget_repo.list_all(user_id=user.id) == []


@pytest.mark.parametrize("amount", ["", "0", "-100", "lots", "1e400", "1e-400"])
def test_bad_amount_rejected(signed_in, make_form, budget_repo, user, amount):
    form = make_form(signed_in)
    form.amount = amount
    with pytest.raises(ValidationError) as excinfo:
        form.submit()
    assert excinfo.value.field == "amount"
    assert budget_repo.list_all(user_id=user.id) == []


def test_requires_identity(auth, make_form):
    form = make_form(auth)
    form.amount = "1000"
    with pytest.raises(AuthError):
        form.submit()


def test_prior_budgets_left_untouched(signed_in, make_form, budget_repo, user, budget_factory):
    budget_factory(user.id, amount=300.0)
    form = make_form(signed_in)
    form.amount = "900"
    form.submit()

    budgets = budget_repo.list_all(user_id=user.id)
    assert sorted(b.amount for b in budgets) == [300.0, 900.0]
    assert budget_repo.get_active(user_id=user.id).amount == 900.0
