"""Trade commands for Deltalytix CLI.

Handles CSV import, trade listing, annotations and deletion.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from deltalytix.cli.common import (
    DATE_FORMATS,
    colored_money,
    console,
    fail,
    get_store,
    money,
)
from deltalytix.errors import AgentError, IngestionError


def parse_mapping_options(values: tuple[str, ...]) -> dict[str, str]:
    """Parse ``--map field=header`` options into a dict.

    Raises:
        click.BadParameter: If an option is not of the form field=header.
    """
    mapping = {}
    for value in values:
        field, sep, header = value.partition("=")
        if not sep or not field.strip() or not header.strip():
            raise click.BadParameter(f"expected FIELD=HEADER, got {value!r}", param_hint="--map")
        mapping[field.strip()] = header.strip()
    return mapping


def _ai_mappings(path: str) -> dict[str, str]:
    """Ask the column mapping agent for a mapping of the file's headers."""
    from deltalytix.agents.base import get_api_key
    from deltalytix.agents.mapper import ColumnMappingAgent
    from deltalytix.ingest import read_header

    if not get_api_key():
        fail("OPENAI_API_KEY is not set; AI column mapping is unavailable.")
    headers, sample = read_header(path)
    try:
        with console.status("[bold green]Suggesting column mapping..."):
            mapping = ColumnMappingAgent().suggest(headers, sample)
    except AgentError as e:
        fail(str(e), title="AI mapping failed")
    if not mapping:
        console.print("[yellow]AI suggested no column mapping; using built-in names.[/yellow]")
    return mapping


@click.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", "account_number", default=None, help="Assign all trades to this account.")
@click.option("--map", "mappings", multiple=True, help="Column override as FIELD=HEADER.")
@click.option("--delimiter", default=",", show_default=True, help="CSV delimiter.")
@click.option("--ai", "use_ai", is_flag=True, default=False, help="Let AI suggest column mappings.")
def import_trades(
    path: str,
    account_number: Optional[str],
    mappings: tuple[str, ...],
    delimiter: str,
    use_ai: bool,
) -> None:
    """Import trades from the CSV file at PATH.

    Columns are recognized by name. Use --map to point a trade field at a
    specific header, or --ai to have one suggested.

    \b
    Examples:
      deltalytix import trades.csv --account ACC1
      deltalytix import export.csv --map pnl="Realized P/L" --map instrument=Contract
    """
    from deltalytix.ingest import read_trades_csv

    overrides = {}
    if use_ai:
        overrides.update(_ai_mappings(path))
    overrides.update(parse_mapping_options(mappings))

    try:
        trades = read_trades_csv(
            path,
            account_number=account_number,
            mappings=overrides or None,
            delimiter=delimiter,
        )
    except IngestionError as e:
        fail(str(e), title="Import failed")

    if not trades:
        console.print("[yellow]No trades found in file.[/yellow]")
        return

    missing_account = sum(1 for t in trades if not t.account_number)
    if missing_account:
        fail(
            f"{missing_account} trade(s) have no account number.\n"
            "Use --account to assign one.",
            title="Import failed",
        )

    store = get_store()
    inserted = store.save_trades(trades)
    skipped = len(trades) - inserted
    console.print(f"[green]✓[/green] Imported {inserted} trade(s)")
    if skipped:
        console.print(f"[dim]Skipped {skipped} duplicate trade(s)[/dim]")

    unknown = sorted({t.account_number for t in trades} - {a.account_number for a in store.list_accounts()})
    if unknown:
        console.print(
            f"[yellow]No configuration for account(s): {', '.join(unknown)}.[/yellow] "
            "Run [cyan]deltalytix account configure[/cyan] to set them up."
        )


@click.command()
@click.option("--account", "account_number", default=None, help="Only this account.")
@click.option("--from", "from_date", type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.option("--to", "to_date", type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.option("--limit", type=int, default=50, show_default=True, help="Show the latest N trades.")
def trades(account_number, from_date, to_date, limit: int) -> None:
    """List imported trades."""
    store = get_store()
    rows = store.get_trades(
        account_number=account_number,
        from_date=from_date.date() if from_date else None,
        to_date=to_date.date() if to_date else None,
    )

    if not rows:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title="[bold]Trades[/bold]",
            border_style="dim",
        ))
        return

    shown = rows[-limit:] if limit > 0 else rows
    table = Table(
        title=f"Trades ({len(shown)} of {len(rows)})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Entry")
    table.add_column("Account")
    table.add_column("Instrument", style="bold")
    table.add_column("Side")
    table.add_column("Qty", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Fees", justify="right")
    table.add_column("Tags")

    for t in shown:
        side_color = "green" if t.side == "long" else "red"
        table.add_row(
            str(t.id),
            t.entry_date.strftime("%Y-%m-%d %H:%M") if t.entry_date else "-",
            t.account_number,
            t.instrument,
            f"[{side_color}]{t.side.upper()}[/{side_color}]",
            str(t.quantity),
            colored_money(t.net_pnl),
            money(t.commission),
            ", ".join(t.tags) or "-",
        )

    console.print(table)


@click.command()
@click.argument("trade_id", type=int)
@click.option("--tag", "tags", multiple=True, help="Tag to set (repeatable).")
@click.option("--clear-tags", is_flag=True, default=False, help="Remove all tags.")
@click.option("--comment", default=None, help="Comment to set (empty string clears it).")
def annotate(trade_id: int, tags: tuple[str, ...], clear_tags: bool, comment: Optional[str]) -> None:
    """Set tags and comment of trade TRADE_ID."""
    if not tags and not clear_tags and comment is None:
        raise click.UsageError("Nothing to change: pass --tag, --clear-tags or --comment.")

    store = get_store()
    new_tags = None
    if clear_tags:
        new_tags = []
    elif tags:
        existing = store.get_trade(trade_id)
        if existing is None:
            fail(f"Trade {trade_id} not found")
        new_tags = list(existing.tags) + list(tags)

    if not store.update_trade_annotations(trade_id, tags=new_tags, comment=comment):
        fail(f"Trade {trade_id} not found")
    console.print(f"[green]✓[/green] Updated trade {trade_id}")


@click.command(name="delete-trade")
@click.argument("trade_id", type=int)
def delete_trade(trade_id: int) -> None:
    """Delete trade TRADE_ID."""
    store = get_store()
    if not store.delete_trade(trade_id):
        fail(f"Trade {trade_id} not found")
    console.print(f"[green]✓[/green] Deleted trade {trade_id}")
