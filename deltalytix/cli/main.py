"""Main CLI entry point for Deltalytix.

Subcommands live in their own modules and are imported only when
invoked, so ``deltalytix --help`` does not load the agents SDK.
"""

import importlib
import logging

import click

# Command name -> "module:attribute" of the click command.
LAZY_SUBCOMMANDS = {
    "account": "deltalytix.cli.accounts:account",
    "import": "deltalytix.cli.trades:import_trades",
    "trades": "deltalytix.cli.trades:trades",
    "annotate": "deltalytix.cli.trades:annotate",
    "delete-trade": "deltalytix.cli.trades:delete_trade",
    "payout": "deltalytix.cli.payouts:payout",
    "overview": "deltalytix.cli.overview:overview",
    "stats": "deltalytix.cli.stats:stats",
}

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class LazyGroup(click.Group):
    """Click group resolving subcommands from ``module:attribute`` targets."""

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)) | set(self.lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in self.commands and cmd_name in self.lazy_subcommands:
            self.add_command(self._resolve(cmd_name), cmd_name)
        return super().get_command(ctx, cmd_name)

    def _resolve(self, cmd_name: str) -> click.Command:
        module_name, _, attr = self.lazy_subcommands[cmd_name].partition(":")
        command = getattr(importlib.import_module(module_name), attr, None)
        if not isinstance(command, click.Command):
            raise click.ClickException(
                f"'{self.lazy_subcommands[cmd_name]}' is not a click command"
            )
        return command


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="deltalytix")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Database file (defaults to the configured path).",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, db_path: str | None, verbose: bool) -> None:
    """Deltalytix - trading journal analytics and prop-firm account tracking.

    Import your trades, configure your prop-firm accounts and follow your
    balance, drawdown floor and progress toward the profit target.

    \b
    Quick Start:
      deltalytix account configure ACC1 --starting-balance 50000 \\
          --profit-target 3000 --drawdown 2000 --trailing
      deltalytix import trades.csv --account ACC1
      deltalytix overview ACC1
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
