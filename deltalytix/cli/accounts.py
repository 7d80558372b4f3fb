"""Account commands for Deltalytix CLI.

Create, update, list and delete prop-firm account configurations.
"""

from typing import Optional

import click
from pydantic import ValidationError
from rich.panel import Panel
from rich.table import Table

from deltalytix.cli.common import (
    DATE_FORMATS,
    DECIMAL,
    console,
    fail,
    get_store,
    money,
    validation_message,
)
from deltalytix.models import AccountConfiguration


def build_account(
    account_number: str,
    existing: Optional[AccountConfiguration] = None,
    **changes,
) -> AccountConfiguration:
    """Create an account configuration, or a validated copy of ``existing``.

    Options left as None keep their current (or default) value.

    Raises:
        ValidationError: If the resulting configuration is invalid.
    """
    values = existing.model_dump() if existing else {"account_number": account_number}
    values.update({k: v for k, v in changes.items() if v is not None})
    return AccountConfiguration(**values)


@click.group()
def account() -> None:
    """Manage trading account configurations."""


@account.command()
@click.argument("account_number")
@click.option("--starting-balance", type=DECIMAL, default=None, help="Starting balance.")
@click.option("--profit-target", type=DECIMAL, default=None, help="Profit target (0 = unset).")
@click.option("--drawdown", "drawdown_threshold", type=DECIMAL, default=None, help="Max drawdown.")
@click.option(
    "--trailing/--static",
    "trailing_drawdown",
    default=None,
    help="Trailing or static drawdown floor.",
)
@click.option(
    "--stop-profit",
    "trailing_stop_profit",
    type=DECIMAL,
    default=None,
    help="Profit at which a trailing floor stops moving.",
)
@click.option("--propfirm", default=None, help="Prop firm name.")
@click.option(
    "--consistency",
    "consistency_percentage",
    type=DECIMAL,
    default=None,
    help="Max share of total profit allowed on one day (%).",
)
@click.option(
    "--reset-date",
    type=click.DateTime(formats=DATE_FORMATS),
    default=None,
    help="Ignore trades entered before this date.",
)
@click.option("--buffer", type=DECIMAL, default=None, help="Profit buffer.")
@click.option(
    "--consider-buffer/--ignore-buffer",
    default=None,
    help="Whether the profit buffer applies.",
)
@click.option(
    "--min-day-pnl",
    "min_pnl_to_count_as_day",
    type=DECIMAL,
    default=None,
    help="Minimum daily P&L for a day to count as a trading day.",
)
def configure(account_number: str, **options) -> None:
    """Create or update the configuration of ACCOUNT_NUMBER.

    \b
    Examples:
      deltalytix account configure ACC1 --starting-balance 50000 --profit-target 3000 --drawdown 2000
      deltalytix account configure ACC1 --trailing --stop-profit 2100
    """
    store = get_store()
    existing = store.get_account(account_number)

    try:
        updated = build_account(account_number, existing, **options)
    except ValidationError as e:
        fail(validation_message(e), title="Invalid account configuration")

    store.save_account(updated)
    verb = "Updated" if existing else "Created"
    console.print(f"[green]✓[/green] {verb} account [bold]{account_number}[/bold]")
    if not updated.is_configured:
        console.print(
            "[yellow]Set a profit target and a drawdown threshold to track progress.[/yellow]"
        )


@account.command(name="list")
def list_accounts() -> None:
    """List configured accounts."""
    store = get_store()
    accounts = store.list_accounts()

    if not accounts:
        console.print(Panel(
            "[dim]No accounts configured[/dim]\n\n"
            "Run [cyan]deltalytix account configure ACCOUNT[/cyan] to add one.",
            title="[bold]Accounts[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Accounts", show_header=True, header_style="bold cyan")
    table.add_column("Account", style="bold")
    table.add_column("Prop Firm")
    table.add_column("Starting", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Drawdown", justify="right")
    table.add_column("Type")

    for acc in accounts:
        kind = "trailing" if acc.trailing_drawdown else "static"
        if acc.trailing_drawdown and acc.trailing_stop_profit > 0:
            kind += f" (locks at +{money(acc.trailing_stop_profit)})"
        table.add_row(
            acc.account_number,
            acc.propfirm or "-",
            money(acc.starting_balance),
            money(acc.profit_target) if acc.profit_target > 0 else "[dim]unset[/dim]",
            money(acc.drawdown_threshold) if acc.drawdown_threshold > 0 else "[dim]unset[/dim]",
            kind,
        )

    console.print(table)


@account.command()
@click.argument("account_number")
def show(account_number: str) -> None:
    """Show the configuration of ACCOUNT_NUMBER."""
    store = get_store()
    acc = store.get_account(account_number)
    if acc is None:
        fail(f"Account '{account_number}' not found")

    lines = [
        f"Prop firm:          {acc.propfirm or '-'}",
        f"Starting balance:   {money(acc.starting_balance)}",
        f"Profit target:      {money(acc.profit_target)}",
        f"Drawdown threshold: {money(acc.drawdown_threshold)}",
        f"Drawdown type:      {'trailing' if acc.trailing_drawdown else 'static'}",
        f"Stop profit:        {money(acc.trailing_stop_profit)}",
        f"Consistency:        {acc.consistency_percentage}%",
        f"Reset date:         {acc.reset_date.strftime('%Y-%m-%d') if acc.reset_date else '-'}",
        f"Buffer:             {money(acc.buffer)} ({'applied' if acc.consider_buffer else 'ignored'})",
        f"Min day P&L:        {money(acc.min_pnl_to_count_as_day)}",
    ]
    console.print(Panel(
        "\n".join(lines),
        title=f"[bold cyan]{acc.account_number}[/bold cyan]",
        border_style="cyan",
    ))


@account.command()
@click.argument("account_number")
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def delete(account_number: str, yes: bool) -> None:
    """Delete ACCOUNT_NUMBER with all its trades and payouts."""
    if not yes:
        click.confirm(
            f"Delete account {account_number} and all its trades and payouts?",
            abort=True,
        )
    store = get_store()
    if not store.delete_account(account_number):
        fail(f"Account '{account_number}' not found")
    console.print(f"[green]✓[/green] Deleted account [bold]{account_number}[/bold]")
