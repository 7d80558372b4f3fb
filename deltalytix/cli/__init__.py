"""CLI commands for Deltalytix.

This package provides the command-line interface for Deltalytix,
including account setup, trade import, payouts, overview and statistics.
"""

from deltalytix.cli.main import cli, main

__all__ = ["cli", "main"]
