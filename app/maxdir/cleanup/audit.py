"""Append-only audit log in glftpd log format.

Every line starts with a ``date "+%a %b %e %T %Y"`` style timestamp and
a MAXDIRLOG (or MAXDIRLOGDONE) tag, so site bots that tail the log can
announce cleanups.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from maxdir.cleanup.models import PROTECTED_REASON, ActionRecord, ActionType

logger = logging.getLogger(__name__)

LOG_TAG = "MAXDIRLOG"
DONE_TAG = "MAXDIRLOGDONE"


def format_timestamp(moment: datetime) -> str:
    """Format a time like ``date "+%a %b %e %T %Y"``.

    %e (space-padded day) is not portable in strftime, so the day is
    padded by hand.

    Args:
        moment: Time to format.

    Returns:
        Timestamp such as ``Mon Jan  5 03:00:01 2026``.
    """
    return f"{moment:%a %b} {moment.day:2d} {moment:%H:%M:%S %Y}"


def format_record(record: ActionRecord) -> str:
    """Format the message part of a decision line.

    Args:
        record: Decision to format.

    Returns:
        Log message without timestamp and tag.
    """
    section = f'"{record.section}"'
    source = f'"{record.source_path}"'
    target = f'"{record.target_path}"'

    if record.action == ActionType.WOULD_CLEAN:
        return f"{section} SANDBOX: Would clean {source}"
    if record.action == ActionType.WOULD_ARCHIVE:
        return f"{section} SANDBOX: Would archive {source} -> {target}"
    if record.action == ActionType.CLEANED:
        return f"{section} Cleaned {source}"
    if record.action == ActionType.ARCHIVED:
        if record.error is not None:
            return f"{section} Archived {source} -> {target} ({record.error})"
        return f"{section} Archived {source} -> {target}"

    if record.error is not None:
        verb = "archive" if record.target_path else "clean"
        return f"{section} Failed to {verb} {source}: {record.error}"
    if record.reason is None or record.reason.startswith(PROTECTED_REASON):
        return f"{section} {source} Excluded directory skipped"
    return f"{section} {source} Skipped: {record.reason}"


class AuditLog:
    """Writes decision and summary lines to the audit log file.

    Each line is appended and flushed on its own, so an interrupted run
    leaves a complete record of what it did up to that point.

    Attributes:
        path: Audit log file.
    """

    def __init__(self, path: Path, clock: Callable[[], datetime] = datetime.now) -> None:
        """Initialize AuditLog.

        Args:
            path: Audit log file; created on first write if missing.
            clock: Source of line timestamps.
        """
        self.path = path
        self._clock = clock

    def write(self, message: str, tag: str = LOG_TAG) -> None:
        """Append one timestamped line.

        Args:
            message: Line content after the tag.
            tag: Log tag.

        Raises:
            OSError: If the file cannot be written.
        """
        line = f"{format_timestamp(self._clock())} {tag}: {message}"
        with self.path.open(mode="a", encoding="utf-8") as f:
            f.write(line + "\n")
            f.flush()
        logger.debug("audit: %s", line)

    def section_event(self, section: str, root: str | Path, event: str) -> None:
        """Log an event concerning a whole section."""
        self.write(f'"{section}" "{root}" {event}')

    def record(self, record: ActionRecord) -> None:
        """Log a single decision."""
        self.write(format_record(record))

    def done(self, section: str, processed: int) -> None:
        """Log the summary line of a section."""
        self.write(f'"{section}" "Cleanup Done {processed}"', tag=DONE_TAG)

    def lock_held(self) -> None:
        """Log that the run did not start because of an existing lock."""
        self.write("Lockfile exists, another instance may be running. Exiting.")
