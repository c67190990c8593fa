"""Shared Rich display functions for run reports.

Provides table builders and summary printers used by the run and
status commands.
"""

import json
from typing import Any

from rich.table import Table

from maxdir.cleanup.models import ActionRecord, ActionType, RunReport, SectionStatus, SectionSummary
from maxdir.utils.formatting import console, print_info, print_success, print_warning

_ACTION_LABELS: dict[ActionType, str] = {
    ActionType.SKIP: "[skipped]skip[/skipped]",
    ActionType.WOULD_CLEAN: "[simulated]would clean[/simulated]",
    ActionType.WOULD_ARCHIVE: "[simulated]would archive[/simulated]",
    ActionType.CLEANED: "[cleaned]cleaned[/cleaned]",
    ActionType.ARCHIVED: "[archived]archived[/archived]",
}

_COUNTED_STATUSES = frozenset(
    (SectionStatus.WITHIN_LIMIT, SectionStatus.OVER_LIMIT, SectionStatus.PROCESSED)
)

_STATUS_LABELS: dict[SectionStatus, str] = {
    SectionStatus.MISSING: "[error]missing[/error]",
    SectionStatus.PROTECTED: "[warning]protected[/warning]",
    SectionStatus.ARCHIVE: "[warning]archive[/warning]",
    SectionStatus.WITHIN_LIMIT: "[success]ok[/success]",
    SectionStatus.OVER_LIMIT: "[warning]over[/warning]",
    SectionStatus.PROCESSED: "[info]processed[/info]",
}


def create_records_table(records: list[ActionRecord], simulate: bool = False) -> Table:
    """Create a Rich table listing per-directory decisions.

    Args:
        records: Decisions to display, in processing order.
        simulate: Whether this was a sandbox run (changes table title).

    Returns:
        Rich Table configured for record display.
    """
    title = "Cleanup Actions (Sandbox)" if simulate else "Cleanup Actions"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Section", no_wrap=True)
    table.add_column("Action", width=13)
    table.add_column("Directory", style="path")
    table.add_column("Details")

    for record in records:
        if record.error:
            details = f"[error]{record.error}[/error]"
        elif record.target_path:
            details = f"[muted]-> {record.target_path}[/muted]"
        else:
            details = f"[muted]{record.reason or ''}[/muted]"

        table.add_row(record.section, _ACTION_LABELS[record.action], record.source_path, details)

    return table


def create_sections_table(sections: list[SectionSummary], title: str = "Sections") -> Table:
    """Create a Rich table with one row per section.

    Args:
        sections: Section summaries to display.
        title: Table title.

    Returns:
        Rich Table configured for section display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Section", no_wrap=True)
    table.add_column("Status", width=10)
    table.add_column("Dirs", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Excess", justify="right")
    table.add_column("Root", style="muted")

    for summary in sections:
        counted = summary.status in _COUNTED_STATUSES
        table.add_row(
            summary.section,
            _STATUS_LABELS[summary.status],
            str(summary.total) if counted else "-",
            str(summary.limit) if counted else "-",
            str(summary.excess) if counted else "-",
            summary.root,
        )

    return table


def print_run_summary(report: RunReport) -> None:
    """Print the outcome of a run.

    Args:
        report: Completed run report.
    """
    if not report.sections:
        print_info("No sections configured.")
        return

    if report.failed:
        print_warning(f"{report.processed} directories processed, {report.failed} failed")
    elif report.simulate:
        print_info(f"Sandbox: {report.processed} directories would be processed.")
    elif report.processed:
        print_success(f"{report.processed} directories processed.")
    else:
        print_success("All sections within limits.")


def report_to_dict(report: RunReport) -> dict[str, Any]:
    """Convert a run report to a JSON-serializable dictionary."""
    return {
        "simulate": report.simulate,
        "processed": report.processed,
        "failed": report.failed,
        "sections": [
            {
                "section": s.section,
                "root": s.root,
                "status": s.status.value,
                "total": s.total,
                "limit": s.limit,
                "processed": s.processed,
                "records": [
                    {
                        "source_path": r.source_path,
                        "action": r.action.value,
                        "target_path": r.target_path,
                        "reason": r.reason,
                        "error": r.error,
                    }
                    for r in s.records
                ],
            }
            for s in report.sections
        ],
    }


def print_report_json(report: RunReport) -> None:
    """Print a run report as JSON."""
    console.print_json(json.dumps(report_to_dict(report)))
