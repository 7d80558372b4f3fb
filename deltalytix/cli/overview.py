"""Overview command: balance, drawdown floor and progress per account."""

from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from deltalytix.cli.common import colored_money, console, fail, get_store, money, percent, print_error
from deltalytix.errors import AccountNotFoundError, DataStoreError
from deltalytix.models import RiskBucket
from deltalytix.overview import AccountOverview, OverviewStatus, build_account_overview

RISK_COLORS = {
    RiskBucket.SAFE: "green",
    RiskBucket.WARNING: "yellow",
    RiskBucket.DANGER: "red",
}


def risk_label(overview: AccountOverview) -> str:
    """Colored risk bucket, or the reason there is none."""
    if overview.status == OverviewStatus.UNAVAILABLE:
        return "[red]data unavailable[/red]"
    if overview.status == OverviewStatus.UNCONFIGURED:
        return "[yellow]setup needed[/yellow]"
    bucket = overview.progress.risk_bucket
    color = RISK_COLORS[bucket]
    return f"[{color}]{bucket.value}[/{color}]"


def render_overview(overview: AccountOverview) -> Panel:
    """Render a single account overview as a panel."""
    acc = overview.account
    title = f"[bold cyan]{acc.account_number}[/bold cyan]"
    if acc.propfirm:
        title += f" [dim]({acc.propfirm})[/dim]"

    if overview.status == OverviewStatus.UNAVAILABLE:
        return Panel(
            "[red]Trade or payout data could not be loaded.[/red]\n\n"
            f"[dim]{overview.error}[/dim]",
            title=title,
            border_style="red",
        )

    state = overview.balance
    lines = [
        f"Balance:        [bold]{money(state.current_balance)}[/bold]",
        f"Net profit:     {colored_money(state.current_profits)}",
        f"Paid payouts:   {money(state.total_paid_payouts)}",
        f"Drawdown floor: {money(state.max_drawdown_level)}"
        + (" [dim](locked)[/dim]" if state.stop_profit_locked else ""),
        f"Distance:       {colored_money(state.distance_to_drawdown)}",
    ]

    if overview.status == OverviewStatus.UNCONFIGURED:
        lines += [
            "",
            "[yellow]Set up your account to track progress:[/yellow]",
            f"[cyan]deltalytix account configure {acc.account_number} "
            "--profit-target AMOUNT --drawdown AMOUNT[/cyan]",
        ]
        return Panel("\n".join(lines), title=title, border_style="yellow")

    progress = overview.progress
    consistency = overview.metrics.get("consistency", {})
    lines += [
        "",
        f"Progress:       {percent(progress.progress_percentage)} of {money(acc.profit_target)} target",
        f"Remaining:      {money(progress.remaining_to_target)}",
        f"Drawdown used:  {percent(progress.drawdown_progress)}",
        f"Risk:           {risk_label(overview)} ({percent(progress.distance_percentage)} to floor)",
        f"Trading days:   {overview.metrics.get('valid_trading_days', 0)} valid / "
        f"{overview.metrics.get('total_trading_days', 0)} total",
    ]
    if consistency.get("max_allowed_daily_profit") is not None:
        mark = "[green]✓[/green]" if consistency["is_consistent"] else "[red]✗[/red]"
        lines.append(
            f"Consistency:    {mark} best day {money(consistency['highest_profit_day'])} "
            f"(max {money(consistency['max_allowed_daily_profit'])})"
        )
    if state.is_breached:
        lines += ["", "[bold red]Drawdown floor breached[/bold red]"]

    border = RISK_COLORS[progress.risk_bucket]
    return Panel("\n".join(lines), title=title, border_style=border)


@click.command()
@click.argument("account_number", required=False)
def overview(account_number: Optional[str]) -> None:
    """Show balance, drawdown floor and progress.

    With ACCOUNT_NUMBER shows that account in detail, otherwise a summary
    of all configured accounts.

    \b
    Examples:
      deltalytix overview
      deltalytix overview ACC1
    """
    store = get_store()

    if account_number:
        try:
            console.print(render_overview(build_account_overview(store, account_number)))
        except (AccountNotFoundError, DataStoreError) as e:
            fail(str(e))
        return

    accounts = store.list_accounts()
    if not accounts:
        console.print(Panel(
            "[dim]No accounts configured[/dim]\n\n"
            "Run [cyan]deltalytix account configure ACCOUNT[/cyan] to add one.",
            title="[bold]Overview[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Accounts Overview", show_header=True, header_style="bold cyan")
    table.add_column("Account", style="bold")
    table.add_column("Balance", justify="right")
    table.add_column("Floor", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Risk")

    for acc in accounts:
        try:
            item = build_account_overview(store, acc.account_number)
        except (AccountNotFoundError, DataStoreError) as e:
            print_error(str(e))
            table.add_row(acc.account_number, "-", "-", "-", "-", "[red]error[/red]")
            continue
        if item.status == OverviewStatus.UNAVAILABLE:
            table.add_row(acc.account_number, "-", "-", "-", "-", risk_label(item))
            continue
        table.add_row(
            acc.account_number,
            money(item.balance.current_balance),
            money(item.balance.max_drawdown_level),
            colored_money(item.balance.distance_to_drawdown),
            percent(item.progress.progress_percentage),
            risk_label(item),
        )

    console.print(table)
