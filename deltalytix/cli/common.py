"""Helpers shared by the CLI commands."""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

console = Console()


class DecimalType(click.ParamType):
    """Click parameter type for finite decimal amounts."""

    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            result = Decimal(str(value).replace(",", "").strip())
        except InvalidOperation:
            self.fail(f"{value!r} is not a valid amount", param, ctx)
        if not result.is_finite():
            self.fail(f"{value!r} is not a finite amount", param, ctx)
        return result


DECIMAL = DecimalType()

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


def get_store(ctx: Optional[click.Context] = None):
    """Get the data store, honoring the global ``--db`` option."""
    from deltalytix.config import get_data_store
    from deltalytix.db.store import DataStore

    ctx = ctx or click.get_current_context(silent=True)
    db_path = (ctx.obj or {}).get("db_path") if ctx else None
    if db_path:
        return DataStore(Path(db_path))
    return get_data_store()


def print_error(message: str, title: str = "Error") -> None:
    """Print an error panel."""
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def fail(message: str, title: str = "Error") -> None:
    """Print an error panel and exit with status 1."""
    print_error(message, title)
    raise SystemExit(1)


def validation_message(error: ValidationError) -> str:
    """Human readable summary of a pydantic validation error."""
    lines = []
    for item in error.errors():
        where = ".".join(str(p) for p in item["loc"])
        lines.append(f"{where}: {item['msg']}" if where else item["msg"])
    return "\n".join(lines)


def money(value: Optional[Decimal], signed: bool = False) -> str:
    """Format an amount with two decimals, e.g. ``$1,250.00``."""
    if value is None:
        return "-"
    sign = ""
    if value < 0:
        sign = "-"
    elif signed and value > 0:
        sign = "+"
    return f"{sign}${abs(value):,.2f}"


def colored_money(value: Optional[Decimal]) -> str:
    """Signed amount colored green for gains and red for losses."""
    if value is None:
        return "-"
    color = "green" if value >= 0 else "red"
    return f"[{color}]{money(value, signed=True)}[/{color}]"


def percent(value: Optional[Decimal]) -> str:
    return "-" if value is None else f"{value:.1f}%"
