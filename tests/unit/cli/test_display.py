"""Unit tests for display functions.

Tests for tables and the JSON report.
"""

import pytest
from maxdir.cleanup.models import (
    ActionRecord,
    ActionType,
    RunReport,
    SectionStatus,
    SectionSummary,
)
from maxdir.cli.display import create_records_table, create_sections_table, report_to_dict


@pytest.fixture
def report() -> RunReport:
    """Sandbox report with one processed and one missing section."""
    return RunReport(
        simulate=True,
        sections=[
            SectionSummary(
                section="X265",
                root="/glftpd/site/X265",
                status=SectionStatus.PROCESSED,
                total=6,
                limit=5,
                records=[
                    ActionRecord(
                        "X265",
                        "/glftpd/site/X265/Old.Release-GRP",
                        ActionType.WOULD_ARCHIVE,
                        target_path="/glftpd/site/_ARCHiVE/X265/Old.Release-GRP",
                    )
                ],
            ),
            SectionSummary("MP3", "/glftpd/site/MP3", SectionStatus.MISSING),
        ],
    )


class TestTables:
    """Tests for table builders."""

    def test_records_table(self, report: RunReport) -> None:
        """One row per record, titled by mode."""
        table = create_records_table(report.records, simulate=True)

        assert table.title == "Cleanup Actions (Sandbox)"
        assert table.row_count == 1

    def test_sections_table(self, report: RunReport) -> None:
        """One row per section."""
        table = create_sections_table(report.sections)

        assert table.title == "Sections"
        assert table.row_count == 2


class TestReportToDict:
    """Tests for report_to_dict function."""

    def test_structure(self, report: RunReport) -> None:
        """The report dictionary carries totals, sections and records."""
        data = report_to_dict(report)

        assert data["simulate"] is True
        assert data["processed"] == 1
        assert data["failed"] == 0
        assert [s["status"] for s in data["sections"]] == ["processed", "missing"]
        record = data["sections"][0]["records"][0]
        assert record["action"] == "would_archive"
        assert record["target_path"] == "/glftpd/site/_ARCHiVE/X265/Old.Release-GRP"
        assert data["sections"][1]["records"] == []
