"""Payout commands for Deltalytix CLI."""

from datetime import datetime
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
from deltalytix.models import Payout, PAYOUT_STATUSES

STATUS_COLORS = {
    "PENDING": "yellow",
    "VALIDATED": "cyan",
    "REFUSED": "red",
    "PAID": "green",
}


@click.group()
def payout() -> None:
    """Record and manage payouts."""


@payout.command()
@click.argument("account_number")
@click.argument("amount", type=DECIMAL)
@click.option(
    "--date",
    "payout_date",
    type=click.DateTime(formats=DATE_FORMATS),
    default=None,
    help="Payout date (defaults to now).",
)
@click.option(
    "--status",
    type=click.Choice(PAYOUT_STATUSES, case_sensitive=False),
    default="PENDING",
    show_default=True,
)
def add(account_number: str, amount, payout_date: Optional[datetime], status: str) -> None:
    """Record a payout of AMOUNT for ACCOUNT_NUMBER."""
    store = get_store()
    if store.get_account(account_number) is None:
        fail(f"Account '{account_number}' not found")

    try:
        record = Payout(
            account_number=account_number,
            amount=amount,
            date=payout_date or datetime.now(),
            status=status,
        )
    except ValidationError as e:
        fail(validation_message(e), title="Invalid payout")

    payout_id = store.save_payout(record)
    console.print(
        f"[green]✓[/green] Recorded payout #{payout_id} of {money(record.amount)} "
        f"({record.status}) for [bold]{account_number}[/bold]"
    )


@payout.command(name="list")
@click.argument("account_number", required=False)
def list_payouts(account_number: Optional[str]) -> None:
    """List payouts, optionally for ACCOUNT_NUMBER only."""
    store = get_store()
    records = store.get_payouts(account_number=account_number)

    if not records:
        console.print(Panel(
            "[dim]No payouts recorded[/dim]",
            title="[bold]Payouts[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Payouts", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Date")
    table.add_column("Account", style="bold")
    table.add_column("Amount", justify="right")
    table.add_column("Status")

    for p in records:
        color = STATUS_COLORS.get(p.status, "white")
        table.add_row(
            str(p.id),
            p.date.strftime("%Y-%m-%d"),
            p.account_number,
            money(p.amount),
            f"[{color}]{p.status}[/{color}]",
        )

    console.print(table)


@payout.command()
@click.argument("payout_id", type=int)
@click.argument("status", type=click.Choice(PAYOUT_STATUSES, case_sensitive=False))
def status(payout_id: int, status: str) -> None:
    """Change the status of payout PAYOUT_ID."""
    store = get_store()
    if not store.update_payout_status(payout_id, status):
        fail(f"Payout {payout_id} not found")
    console.print(f"[green]✓[/green] Payout #{payout_id} is now {status.upper()}")


@payout.command()
@click.argument("payout_id", type=int)
def delete(payout_id: int) -> None:
    """Delete payout PAYOUT_ID."""
    store = get_store()
    if not store.delete_payout(payout_id):
        fail(f"Payout {payout_id} not found")
    console.print(f"[green]✓[/green] Deleted payout #{payout_id}")
