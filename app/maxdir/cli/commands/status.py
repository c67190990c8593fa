"""Status command implementation.

Shows how many directories each section holds compared to its limit.
Read-only: takes no lock and writes nothing to the audit log.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from maxdir.cleanup.models import SectionStatus, SectionSummary
from maxdir.cleanup.runner import RunCoordinator
from maxdir.cli.commands.run import OutputFormat
from maxdir.cli.display import create_sections_table
from maxdir.core.config import require_config
from maxdir.utils.formatting import console, print_info, print_success, print_warning

app = typer.Typer(
    help="Show directory counts per section.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def show_status(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file.",
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
    """Show directory counts and limits for every section."""
    if ctx.invoked_subcommand is not None:
        return

    config = require_config(config_path)
    summaries = RunCoordinator(config).survey()

    if output_format == OutputFormat.JSON:
        _print_json(summaries)
        return

    if not summaries:
        print_info("No sections configured.")
        return

    console.print(create_sections_table(summaries))

    over = [s for s in summaries if s.status == SectionStatus.OVER_LIMIT]
    if over:
        excess = sum(s.excess for s in over)
        print_warning(f"{len(over)} section(s) over limit, {excess} directories in excess")
    else:
        print_success("All sections within limits.")


def _print_json(summaries: list[SectionSummary]) -> None:
    """Display section summaries as JSON."""
    data = [
        {
            "section": s.section,
            "root": s.root,
            "status": s.status.value,
            "total": s.total,
            "limit": s.limit,
            "excess": s.excess,
        }
        for s in summaries
    ]
    console.print_json(json.dumps(data))
