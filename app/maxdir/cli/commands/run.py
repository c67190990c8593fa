"""Run command implementation.

Enforces the directory quota of every configured section. Meant to be
called from cron; the exit code tells whether the run took place.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from maxdir.cleanup.runner import RunCoordinator
from maxdir.cli.display import (
    create_records_table,
    create_sections_table,
    print_report_json,
    print_run_summary,
)
from maxdir.core.config import CleanupAction, MaxdirConfig, require_config
from maxdir.core.errors import LockHeldError
from maxdir.core.paths import ensure_log_file
from maxdir.utils.formatting import console, print_error

app = typer.Typer(
    help="Enforce directory limits on all sections.",
    invoke_without_command=True,
)

# Exit code when another instance holds the run lock
EXIT_LOCKED = 1
# Exit code when the configuration or environment prevents a run
EXIT_CONFIG = 2


class OutputFormat(str, Enum):
    """Output format options for run results."""

    TABLE = "table"
    JSON = "json"


def apply_overrides(
    config: MaxdirConfig,
    sandbox: bool | None,
    action: CleanupAction | None,
) -> MaxdirConfig:
    """Apply command-line overrides to a loaded configuration.

    The result is validated again, so switching to move mode still
    requires an archive path for every section.

    Args:
        config: Loaded configuration.
        sandbox: Sandbox override, or None to keep the configured value.
        action: Action override, or None to keep the configured value.

    Returns:
        The configuration with overrides applied.

    Raises:
        ValidationError: If the overridden configuration is invalid.
    """
    overrides: dict[str, Any] = {}
    if sandbox is not None:
        overrides["sandbox"] = sandbox
    if action is not None:
        overrides["action"] = action
    if not overrides:
        return config
    return MaxdirConfig.model_validate({**config.model_dump(), **overrides})


@app.callback(invoke_without_command=True)
def run_cleanup(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file.",
        ),
    ] = None,
    sandbox: Annotated[
        bool | None,
        typer.Option(
            "--dry-run/--live",
            help="Override the configured sandbox mode.",
            show_default=False,
        ),
    ] = None,
    action: Annotated[
        CleanupAction | None,
        typer.Option(
            "--action",
            "-a",
            help="Override the configured cleanup action.",
            case_sensitive=False,
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Delete or archive the oldest directories of sections over their limit.

    Examples:
        maxdir run                  # Use sandbox/action from the config
        maxdir run --dry-run        # Log what would happen, change nothing
        maxdir run --live -a delete # Delete excess directories
    """
    if ctx.invoked_subcommand is not None:
        return

    config = require_config(config_path)
    try:
        config = apply_overrides(config, sandbox, action)
    except ValidationError as e:
        print_error(f"Invalid overrides: {e}")
        raise typer.Exit(code=EXIT_CONFIG) from e

    try:
        ensure_log_file(config.log_file)
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_CONFIG) from e

    try:
        report = RunCoordinator(config).run()
    except LockHeldError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_LOCKED) from e
    except RuntimeError as e:
        print_error(f"Cannot start run: {e}")
        raise typer.Exit(code=EXIT_CONFIG) from e

    quiet = bool((ctx.obj or {}).get("quiet"))
    if output_format == OutputFormat.JSON:
        print_report_json(report)
        return
    if quiet:
        return

    if report.records:
        console.print(create_records_table(report.records, simulate=report.simulate))
    if report.sections:
        title = "Sections (Sandbox)" if report.simulate else "Sections"
        console.print(create_sections_table(report.sections, title=title))
    print_run_summary(report)
