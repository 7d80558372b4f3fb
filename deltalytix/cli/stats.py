"""Statistics command for Deltalytix CLI.

Shows summary statistics and P&L breakdowns of the imported trades.
"""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from deltalytix.cli.common import DATE_FORMATS, colored_money, console, get_store, money, percent
from deltalytix.metrics.statistics import (
    WEEKDAY_NAMES,
    calculate_statistics,
    daily_calendar,
    pnl_by_hour,
    pnl_by_instrument,
    pnl_by_side,
    pnl_by_weekday,
)

BREAKDOWNS = {
    "hour": ("Hour", pnl_by_hour, lambda k: f"{k:02d}:00"),
    "weekday": ("Weekday", pnl_by_weekday, lambda k: WEEKDAY_NAMES[k]),
    "instrument": ("Instrument", pnl_by_instrument, str),
    "side": ("Side", pnl_by_side, lambda k: k.upper()),
}


def render_summary(stats: dict) -> Panel:
    """Render summary statistics as a panel."""
    pf = stats["profit_factor"]
    lines = [
        f"Trades:         {stats['nb_trades']} "
        f"([green]{stats['nb_win']} W[/green] / [red]{stats['nb_loss']} L[/red] / {stats['nb_be']} BE)",
        f"Win rate:       {percent(stats['win_rate'])}",
        f"Gross P&L:      {colored_money(stats['cumulative_pnl'])}",
        f"Fees:           {money(stats['cumulative_fees'])}",
        f"Net P&L:        {colored_money(stats['net_pnl'])}",
        f"Profit factor:  {f'{pf:.2f}' if pf is not None else '-'}",
        f"Winning streak: {stats['winning_streak']}",
        f"Avg. hold time: {stats['average_position_time']}",
        f"Payouts:        {stats['nb_payouts']} totaling {money(stats['total_payouts'])}",
    ]
    return Panel("\n".join(lines), title="[bold cyan]Statistics[/bold cyan]", border_style="cyan")


def render_breakdown(label: str, buckets: dict, key_format) -> Table:
    """Render a P&L breakdown as a table."""
    table = Table(title=f"P&L by {label}", show_header=True, header_style="bold cyan")
    table.add_column(label, style="bold")
    table.add_column("Trades", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("Avg P&L", justify="right")
    table.add_column("Net P&L", justify="right")
    for key, bucket in buckets.items():
        table.add_row(
            key_format(key),
            str(bucket["trade_count"]),
            percent(bucket["win_rate"]),
            colored_money(bucket["average_pnl"]),
            colored_money(bucket["net_pnl"]),
        )
    return table


def render_calendar(trades) -> Table:
    """Render the per-day calendar as a table."""
    table = Table(title="Daily P&L", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold")
    table.add_column("Trades", justify="right")
    table.add_column("Long/Short", justify="right")
    table.add_column("Net P&L", justify="right")
    for day, values in daily_calendar(trades).items():
        table.add_row(
            day.isoformat(),
            str(values["trade_count"]),
            f"{values['long_count']}/{values['short_count']}",
            colored_money(values["net_pnl"]),
        )
    return table


@click.command()
@click.option("--account", "account_number", default=None, help="Only this account.")
@click.option("--from", "from_date", type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.option("--to", "to_date", type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.option(
    "--by",
    "breakdown",
    type=click.Choice(list(BREAKDOWNS) + ["day"]),
    default=None,
    help="Also show a P&L breakdown.",
)
def stats(account_number: Optional[str], from_date, to_date, breakdown: Optional[str]) -> None:
    """Show trade statistics.

    \b
    Examples:
      deltalytix stats
      deltalytix stats --account ACC1 --by hour
      deltalytix stats --from 2024-01-01 --by instrument
    """
    store = get_store()
    trades = store.get_trades(
        account_number=account_number,
        from_date=from_date.date() if from_date else None,
        to_date=to_date.date() if to_date else None,
    )

    if not trades:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title="[bold]Statistics[/bold]",
            border_style="dim",
        ))
        return

    accounts = {t.account_number for t in trades}
    payouts = [p for p in store.get_payouts() if p.account_number in accounts]
    console.print(render_summary(calculate_statistics(trades, payouts)))

    if breakdown == "day":
        console.print(render_calendar(trades))
    elif breakdown:
        label, func, key_format = BREAKDOWNS[breakdown]
        console.print(render_breakdown(label, func(trades), key_format))
