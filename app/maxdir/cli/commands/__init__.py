"""CLI commands for maxdir.

This package contains all subcommand implementations.
"""

from maxdir.cli.commands import config, run, status

__all__ = ["config", "run", "status"]
