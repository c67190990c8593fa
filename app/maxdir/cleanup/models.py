"""Cleanup domain models.

This module defines the data structures produced during a run: the
directory snapshot of a section, the per-directory decision records
written to the audit log, and the per-section and per-run summaries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

# Reason prefix of SKIP records for protected directories
PROTECTED_REASON = "protected"


class ActionType(str, Enum):
    """Decision taken for a single directory.

    Attributes:
        SKIP: Directory left in place (protected, or the action failed).
        WOULD_CLEAN: Sandbox run; the directory would be deleted.
        WOULD_ARCHIVE: Sandbox run; the directory would be moved to the archive.
        CLEANED: Directory tree was deleted.
        ARCHIVED: Directory was moved to the archive.
    """

    SKIP = "skip"
    WOULD_CLEAN = "would_clean"
    WOULD_ARCHIVE = "would_archive"
    CLEANED = "cleaned"
    ARCHIVED = "archived"

    @property
    def is_mutation(self) -> bool:
        """Whether the filesystem was changed."""
        return self in (ActionType.CLEANED, ActionType.ARCHIVED)


class SectionStatus(str, Enum):
    """Outcome of processing one section.

    Attributes:
        MISSING: Section root does not exist or could not be listed.
        PROTECTED: Section root is a protected path.
        ARCHIVE: Section root is an archive directory.
        WITHIN_LIMIT: Directory count is at or below the quota.
        OVER_LIMIT: Directory count exceeds the quota (read-only survey).
        PROCESSED: Excess directories were handled.
    """

    MISSING = "missing"
    PROTECTED = "protected"
    ARCHIVE = "archive"
    WITHIN_LIMIT = "within_limit"
    OVER_LIMIT = "over_limit"
    PROCESSED = "processed"


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """An immediate subdirectory of a section root.

    Attributes:
        path: Absolute path of the directory.
        modified_at: Modification time as seconds since the epoch.
    """

    path: Path
    modified_at: float

    @property
    def name(self) -> str:
        """Final path component."""
        return self.path.name

    @property
    def modified(self) -> datetime:
        """Modification time as a local datetime."""
        return datetime.fromtimestamp(self.modified_at)


@dataclass(frozen=True, slots=True)
class ActionRecord:
    """One decision about one directory.

    Attributes:
        section: Name of the section the directory belongs to.
        source_path: Directory the decision is about.
        action: What was done (or would be done).
        target_path: Archive destination for archive actions.
        reason: Why the directory was skipped.
        error: Error message when the action failed.
    """

    section: str
    source_path: str
    action: ActionType
    target_path: str | None = None
    reason: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.source_path:
            msg = "Source path cannot be empty"
            raise ValueError(msg)
        if self.action in (ActionType.WOULD_ARCHIVE, ActionType.ARCHIVED) and not self.target_path:
            msg = f"{self.action.value} record needs a target path"
            raise ValueError(msg)

    @property
    def failed(self) -> bool:
        """Check if the action failed."""
        return self.error is not None

    @property
    def counted(self) -> bool:
        """Whether this record counts towards the section's processed total."""
        return self.action != ActionType.SKIP


@dataclass(slots=True)
class SectionSummary:
    """Result of processing one section.

    Attributes:
        section: Section name.
        root: Section root path.
        status: Section outcome.
        total: Number of immediate subdirectories found.
        limit: Configured quota.
        records: Per-directory decisions, oldest first.
    """

    section: str
    root: str
    status: SectionStatus
    total: int = 0
    limit: int = 0
    records: list[ActionRecord] = field(default_factory=list)

    @property
    def excess(self) -> int:
        """Number of directories above the quota."""
        return max(0, self.total - self.limit)

    @property
    def processed(self) -> int:
        """Number of directories cleaned, archived, or simulated."""
        return sum(1 for r in self.records if r.counted)

    @property
    def skipped(self) -> int:
        """Number of excess directories left in place."""
        return sum(1 for r in self.records if not r.counted)

    @property
    def failed(self) -> int:
        """Number of actions that raised an error."""
        return sum(1 for r in self.records if r.failed)


@dataclass(slots=True)
class RunReport:
    """Result of a complete run.

    Attributes:
        simulate: Whether the run was a sandbox run.
        sections: Per-section summaries in configuration order.
    """

    simulate: bool
    sections: list[SectionSummary] = field(default_factory=list)

    @property
    def records(self) -> list[ActionRecord]:
        """All decisions of the run, in processing order."""
        return [r for s in self.sections for r in s.records]

    @property
    def processed(self) -> int:
        """Total number of directories handled."""
        return sum(s.processed for s in self.sections)

    @property
    def failed(self) -> int:
        """Total number of failed actions."""
        return sum(s.failed for s in self.sections)
