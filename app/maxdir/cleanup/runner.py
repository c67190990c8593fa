"""Run coordinator: one locked pass over all configured sections.

For each section, in configuration order:

1. Skip the section if its root is missing or protected.
2. Take an inventory of its immediate subdirectories, oldest first.
3. Select the directories above the quota.
4. Re-check every selected directory against the safety guard, and
   hand the ones that pass to the executor.

Every decision is written to the audit log. The run lock is held for
the whole pass and released on every exit path, including termination
signals.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from maxdir.cleanup.audit import AuditLog
from maxdir.cleanup.executor import ActionExecutor
from maxdir.cleanup.inventory import DirectoryInventory
from maxdir.cleanup.lock import RunLock, terminate_on_signals
from maxdir.cleanup.models import (
    PROTECTED_REASON,
    ActionRecord,
    ActionType,
    DirectoryEntry,
    RunReport,
    SectionStatus,
    SectionSummary,
)
from maxdir.cleanup.policy import excess_count, select_excess
from maxdir.cleanup.protected import ProtectionReason, SafetyGuard
from maxdir.core.config import CleanupAction, MaxdirConfig, SectionConfig
from maxdir.core.errors import InventoryError, LockHeldError

logger = logging.getLogger(__name__)

_ROOT_SKIP_EVENTS: dict[SectionStatus, str] = {
    SectionStatus.MISSING: "Directory does not exist",
    SectionStatus.ARCHIVE: "Archive directory skipped",
    SectionStatus.PROTECTED: "Path is excluded - skipped",
}


class RunCoordinator:
    """Drives a complete cleanup run.

    Collaborators default to the ones described by the configuration
    and can be replaced for testing.

    Args:
        config: Loaded configuration.
        guard: Protected path classifier.
        inventory: Section directory lister.
        executor: Delete/move executor.
        audit: Audit log writer.
        clock: Source of the current time.
    """

    def __init__(
        self,
        config: MaxdirConfig,
        *,
        guard: SafetyGuard | None = None,
        inventory: DirectoryInventory | None = None,
        executor: ActionExecutor | None = None,
        audit: AuditLog | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._guard = guard or SafetyGuard.from_config(config)
        self._inventory = inventory or DirectoryInventory()
        self._executor = executor or ActionExecutor(
            config.action,
            simulate=config.simulate,
            clock=clock,
        )
        self._audit = audit or AuditLog(config.log_file, clock=clock)

    def run(self) -> RunReport:
        """Acquire the run lock and process every section.

        Returns:
            RunReport with one summary per configured section.

        Raises:
            LockHeldError: If another instance holds the run lock.
        """
        try:
            with terminate_on_signals(), RunLock(self._config.lock_file):
                return self._run_sections()
        except LockHeldError as e:
            logger.error("%s", e)
            self._audit.lock_held()
            raise

    def _run_sections(self) -> RunReport:
        report = RunReport(simulate=self._executor.simulate)
        mode = "sandbox" if self._executor.simulate else "live"
        logger.info(
            "Starting %s run: %d section(s), action=%s",
            mode,
            len(self._config.sections),
            self._executor.action.value,
        )

        for section in self._config.sections:
            report.sections.append(self.process_section(section))

        logger.info("Run finished: %d directories processed", report.processed)
        return report

    def process_section(self, section: SectionConfig) -> SectionSummary:
        """Enforce the quota of a single section.

        Args:
            section: Section to process.

        Returns:
            SectionSummary describing what happened.
        """
        root = section.path

        skipped = self._check_root(section)
        if skipped is not None:
            self._audit.section_event(section.name, root, _ROOT_SKIP_EVENTS[skipped])
            return SectionSummary(section.name, str(root), skipped)

        try:
            entries = self._inventory.scan(root)
        except InventoryError as e:
            logger.warning("Skipping section %s: %s", section.name, e)
            self._audit.section_event(section.name, root, "Directory cannot be read - skipped")
            return SectionSummary(section.name, str(root), SectionStatus.MISSING)

        summary = SectionSummary(
            section=section.name,
            root=str(root),
            status=SectionStatus.WITHIN_LIMIT,
            total=len(entries),
            limit=section.max_directories,
        )
        usage = f"({summary.total}/{summary.limit})"

        excess = select_excess(entries, section.max_directories)
        if not excess:
            self._audit.section_event(section.name, root, f"Within limit {usage}")
            return summary

        summary.status = SectionStatus.PROCESSED
        self._audit.section_event(section.name, root, f"Exceeds limit {usage}")

        archive_path = section.archive_path if self._executor.action == CleanupAction.MOVE else None
        for entry in excess:
            record = self._process_entry(entry, section.name, archive_path)
            self._audit.record(record)
            summary.records.append(record)

        self._audit.done(section.name, summary.processed)
        return summary

    def survey(self) -> list[SectionSummary]:
        """Count each section's directories without changing anything.

        Takes no lock and writes nothing to the audit log.

        Returns:
            One summary per section; sections above quota are OVER_LIMIT.
        """
        summaries: list[SectionSummary] = []
        for section in self._config.sections:
            root = str(section.path)
            skipped = self._check_root(section)
            if skipped is not None:
                summaries.append(SectionSummary(section.name, root, skipped))
                continue

            try:
                total = len(self._inventory.scan(section.path))
            except InventoryError as e:
                logger.warning("Cannot survey section %s: %s", section.name, e)
                summaries.append(SectionSummary(section.name, root, SectionStatus.MISSING))
                continue

            over = excess_count(total, section.max_directories) > 0
            summaries.append(
                SectionSummary(
                    section=section.name,
                    root=root,
                    status=SectionStatus.OVER_LIMIT if over else SectionStatus.WITHIN_LIMIT,
                    total=total,
                    limit=section.max_directories,
                )
            )
        return summaries

    def _check_root(self, section: SectionConfig) -> SectionStatus | None:
        """Return the status of a section that must be skipped, or None."""
        if not section.path.is_dir():
            return SectionStatus.MISSING

        reason = self._guard.check(section.path)
        if reason == ProtectionReason.ARCHIVE_DIR:
            return SectionStatus.ARCHIVE
        if reason is not None:
            return SectionStatus.PROTECTED
        return None

    def _process_entry(
        self,
        entry: DirectoryEntry,
        section: str,
        archive_path: Path | None,
    ) -> ActionRecord:
        """Re-check one selected directory and apply the action to it."""
        reason = self._guard.check(entry.path)
        if reason is not None:
            logger.info("Skipping protected directory %s (%s)", entry.path, reason.value)
            return ActionRecord(
                section=section,
                source_path=str(entry.path),
                action=ActionType.SKIP,
                reason=f"{PROTECTED_REASON} ({reason.value})",
            )

        if archive_path is not None and archive_path.is_relative_to(entry.path):
            # Archive nested in the section under a non-standard name
            logger.info("Skipping %s, it contains the archive %s", entry.path, archive_path)
            return ActionRecord(
                section=section,
                source_path=str(entry.path),
                action=ActionType.SKIP,
                reason="contains archive",
            )

        return self._executor.apply(entry, section, archive_path)
