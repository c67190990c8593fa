"""Configuration management commands.

Provides commands to write an example configuration, print the
effective configuration, and show where it is read from.
"""

from pathlib import Path
from typing import Annotated

import typer

from maxdir.core.config import config_to_toml, default_config, require_config, save_config
from maxdir.core.errors import ConfigError
from maxdir.core.paths import get_config_path
from maxdir.utils.formatting import print_error, print_info, print_success

app = typer.Typer(
    help="Manage the maxdir configuration.",
    no_args_is_help=True,
)


@app.command()
def init(
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Where to write the config (default: user config path).",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config."),
    ] = False,
) -> None:
    """Write an example configuration in sandbox mode."""
    config_path = path or get_config_path()

    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(default_config(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
    print_info("Edit the sections, then run 'maxdir run --dry-run' to check.")


@app.command()
def show(
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Config file to show (default: user config path).",
        ),
    ] = None,
) -> None:
    """Print the validated configuration, with defaults filled in."""
    config = require_config(path)
    typer.echo(config_to_toml(config), nl=False)


@app.command("path")
def show_path() -> None:
    """Print the default configuration location."""
    typer.echo(str(get_config_path()))
