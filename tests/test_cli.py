from __future__ import annotations

from datetime import date

import pytest
from click.testing import CliRunner

from spendwatch.cli import cli

CREDENTIALS = ["--username", "asha", "--password", "secret123"]


@pytest.fixture
def runner():
    return CliRunner()


def test_create_user(runner, app_context):
    result = runner.invoke(
        cli, ["create-user", "--username", "neha", "--password", "secret123"], obj=app_context
    )
    assert result.exit_code == 0, result.output
    assert "Created user neha" in result.output


def test_create_user_duplicate_fails(runner, app_context, user):
    result = runner.invoke(
        cli, ["create-user", "--username", "asha", "--password", "secret123"], obj=app_context
    )
    assert result.exit_code == 1
    assert "Username already exists" in result.output


def test_add_expense_and_summary(runner, app_context, user, expense_repo):
    result = runner.invoke(
        cli,
        ["add-expense", *CREDENTIALS, "--title", "Coffee", "--amount", "150",
         "--category", "food", "--date", "05/03/2024"],
        obj=app_context,
    )
    assert result.exit_code == 0, result.output
    assert "Added Coffee: ₹150.00 (Food, 05/03/2024)" in result.output
    [expense] = expense_repo.list_for_user(user_id=user.id)
    assert expense.occurred_on == date(2024, 3, 5)

    result = runner.invoke(cli, ["summary", *CREDENTIALS], obj=app_context)
    assert result.exit_code == 0, result.output
    assert "Total spent:   ₹150" in result.output
    assert "Budget:        not set" in result.output


def test_set_budget_and_alert(runner, app_context, user, expense_factory):
    expense_factory(user.id, amount=850.0)
    result = runner.invoke(
        cli,
        ["set-budget", *CREDENTIALS, "--amount", "1000", "--start", "01/03/2024", "--end", "31/03/2024"],
        obj=app_context,
    )
    assert result.exit_code == 0, result.output
    assert "Budget of ₹1,000 set for 01/03/2024 - 31/03/2024" in result.output

    result = runner.invoke(cli, ["summary", *CREDENTIALS], obj=app_context)
    assert "Budget left:   ₹150" in result.output
    assert "Warning: more than 80% of the budget is spent" in result.output
    assert app_context.dashboard is None


def test_set_budget_rejects_reversed_window(runner, app_context, user, budget_repo):
    result = runner.invoke(
        cli,
        ["set-budget", *CREDENTIALS, "--amount", "1000", "--start", "31/03/2024", "--end", "01/03/2024"],
        obj=app_context,
    )
    assert result.exit_code == 1
    assert "Start date cannot be after end date" in result.output
    assert budget_repo.list_all(user_id=user.id) == []


def test_bad_credentials(runner, app_context, user):
    result = runner.invoke(
        cli, ["summary", "--username", "asha", "--password", "wrong-one"], obj=app_context
    )
    assert result.exit_code == 1
    assert "Invalid username or password" in result.output
