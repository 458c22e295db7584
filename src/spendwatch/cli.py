"""Command-line interface for SpendWatch."""

from __future__ import annotations

import click

from .constants.categories import EXPENSE_CATEGORIES
from .errors import SpendWatchError
from .formatting import format_money
from .logging_config import setup_logging
from .services.auth import create_user


def _app_context(ctx: click.Context):
    """Return the AppContext stored on the click context, building it once."""
    if ctx.obj is None:
        from .desktop.context import create_app_context

        ctx.obj = create_app_context()
        setup_logging(ctx.obj.config)
    return ctx.obj


def _sign_in(app_ctx, username: str, password: str) -> None:
    try:
        app_ctx.auth.sign_in(username=username, password=password)
    except SpendWatchError as exc:
        raise click.ClickException(exc.message) from exc


def _credentials(func):
    func = click.option("--password", prompt=True, hide_input=True)(func)
    func = click.option("--username", "-u", required=True, help="Account username")(func)
    return func


@click.group()
@click.version_option(package_name="spendwatch")
def cli() -> None:
    """Track expenses and budgets from the command line."""


@cli.command("create-user")
@click.option("--username", "-u", required=True)
@click.option("--display-name", default="", help="Name shown in the app bar")
@click.password_option()
@click.pass_context
def create_user_command(ctx: click.Context, username: str, display_name: str, password: str) -> None:
    """Create a local account."""
    app_ctx = _app_context(ctx)
    try:
        user = create_user(
            username=username,
            password=password,
            display_name=display_name,
            session_factory=app_ctx.session_factory,
        )
    except SpendWatchError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"Created user {user.username} (id={user.id})")


@cli.command("add-expense")
@_credentials
@click.option("--title", required=True)
@click.option("--amount", required=True, help="Positive amount, e.g. 150 or 99.50")
@click.option(
    "--category",
    type=click.Choice(EXPENSE_CATEGORIES, case_sensitive=False),
    required=True,
)
@click.option(
    "--date",
    "occurred_on",
    type=click.DateTime(formats=["%d/%m/%Y"]),
    default=None,
    help="DD/MM/YYYY, defaults to today",
)
@click.pass_context
def add_expense(
    ctx: click.Context,
    username: str,
    password: str,
    title: str,
    amount: str,
    category: str,
    occurred_on,
) -> None:
    """Record one expense."""
    app_ctx = _app_context(ctx)
    _sign_in(app_ctx, username, password)
    form = app_ctx.expense_form()
    form.open()
    form.title = title
    form.amount = amount
    form.category = category
    if occurred_on is not None:
        form.occurred_on = occurred_on.date()
    try:
        expense = form.submit()
    except SpendWatchError as exc:
        raise click.ClickException(exc.message) from exc
    symbol = app_ctx.config.CURRENCY_SYMBOL
    click.echo(
        f"Added {expense.title}: {format_money(expense.amount, symbol, decimals=2)} "
        f"({expense.category}, {expense.occurred_on:%d/%m/%Y})"
    )


@cli.command("set-budget")
@_credentials
@click.option("--amount", required=True)
@click.option("--start", "start_text", required=True, help="Start date, DD/MM/YYYY")
@click.option("--end", "end_text", required=True, help="End date, DD/MM/YYYY")
@click.pass_context
def set_budget(
    ctx: click.Context,
    username: str,
    password: str,
    amount: str,
    start_text: str,
    end_text: str,
) -> None:
    """Set a new active budget."""
    app_ctx = _app_context(ctx)
    _sign_in(app_ctx, username, password)
    form = app_ctx.budget_form()
    form.open()
    form.amount = amount
    form.set_start_text(start_text)
    form.set_end_text(end_text)
    try:
        budget = form.submit()
    except SpendWatchError as exc:
        raise click.ClickException(exc.message) from exc
    symbol = app_ctx.config.CURRENCY_SYMBOL
    click.echo(
        f"Budget of {format_money(budget.amount, symbol)} set for "
        f"{budget.start_date:%d/%m/%Y} - {budget.end_date:%d/%m/%Y}"
    )


@cli.command()
@_credentials
@click.pass_context
def summary(ctx: click.Context, username: str, password: str) -> None:
    """Print the dashboard totals."""
    app_ctx = _app_context(ctx)
    _sign_in(app_ctx, username, password)
    errors: list[SpendWatchError] = []
    aggregator = app_ctx.open_dashboard(on_error=errors.append)
    try:
        aggregator.start()
    finally:
        app_ctx.close_dashboard()
    if errors:
        raise click.ClickException(errors[-1].message)

    symbol = app_ctx.config.CURRENCY_SYMBOL
    totals = aggregator.summary
    click.echo(f"Total spent:   {format_money(totals.total_spent, symbol)}")
    click.echo(f"Average daily: {format_money(totals.average_daily, symbol, decimals=2)}")
    if totals.has_budget:
        click.echo(f"Budget:        {format_money(totals.budget_amount or 0.0, symbol)}")
        click.echo(f"Budget left:   {format_money(totals.budget_remaining or 0.0, symbol)}")
    else:
        click.echo("Budget:        not set")
    if totals.alert:
        click.echo(
            f"Warning: more than {aggregator.threshold:.0%} of the budget is spent",
            err=True,
        )


@cli.command()
def run() -> None:
    """Launch the desktop app."""
    from .desktop.app import run as run_desktop

    run_desktop()


if __name__ == "__main__":
    cli()
