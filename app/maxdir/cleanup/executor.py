"""Action executor for excess directories.

Deletes a directory tree or moves it into the section's archive, one
directory at a time. Failures are isolated per directory: they are
returned as SKIP records carrying the error and never raised. A
cross-device move whose source cannot be removed after the copy is
an ARCHIVED record carrying the error.
"""

import errno
import logging
import shutil
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from maxdir.cleanup.models import ActionRecord, ActionType, DirectoryEntry
from maxdir.core.config import CleanupAction

logger = logging.getLogger(__name__)

# Appended to archive targets whose name is already taken
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


class ActionExecutor:
    """Applies the configured cleanup action to single directories.

    Attributes:
        _action: Delete or move.
        _simulate: If True, compute and report decisions without touching anything.
        _clock: Source of the current time for collision suffixes.
        _reserved: Archive targets handed out during this run.
    """

    def __init__(
        self,
        action: CleanupAction,
        *,
        simulate: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the ActionExecutor.

        Args:
            action: Action applied to every directory.
            simulate: If True, report what would be done without doing it.
            clock: Callable returning the current time.
        """
        self._action = action
        self._simulate = simulate
        self._clock = clock
        self._reserved: set[Path] = set()

    @property
    def action(self) -> CleanupAction:
        """The configured action."""
        return self._action

    @property
    def simulate(self) -> bool:
        """Whether this executor only simulates."""
        return self._simulate

    def apply(
        self,
        entry: DirectoryEntry,
        section: str,
        archive_path: Path | None = None,
    ) -> ActionRecord:
        """Apply the configured action to one directory.

        Args:
            entry: Directory to act on.
            section: Section name for the record.
            archive_path: Archive destination (required in move mode).

        Returns:
            ActionRecord describing the outcome.

        Raises:
            ValueError: If move mode is used without an archive path.
        """
        if self._action == CleanupAction.DELETE:
            return self._delete(entry, section)

        if archive_path is None:
            msg = f"Section {section!r} has no archive path for move mode"
            raise ValueError(msg)
        return self._move(entry, section, archive_path)

    def resolve_target(self, source: Path, archive_path: Path) -> Path:
        """Compute where a directory lands in the archive.

        The target is ``archive_path / source.name``. If that name is
        taken, a ``_YYYYMMDD-HHMMSS`` suffix is appended, followed by
        ``-1``, ``-2``, ... if the suffixed name is taken as well.

        Targets already handed out by this executor count as taken, so
        a simulated run reports the same names a live run uses, even
        when sections share an archive and their releases share a name.

        Args:
            source: Directory to be archived.
            archive_path: Archive root.

        Returns:
            Target path that does not exist yet.
        """
        target = archive_path / source.name
        if not self._taken(target):
            return target

        suffixed = f"{source.name}_{self._clock().strftime(TIMESTAMP_FORMAT)}"
        candidate = archive_path / suffixed
        counter = 1
        while self._taken(candidate):
            candidate = archive_path / f"{suffixed}-{counter}"
            counter += 1
        return candidate

    def _taken(self, path: Path) -> bool:
        return path in self._reserved or _exists(path)

    def _delete(self, entry: DirectoryEntry, section: str) -> ActionRecord:
        """Delete a directory tree."""
        source = str(entry.path)

        if self._simulate:
            logger.info("Dry-run: would delete %s", source)
            return ActionRecord(section=section, source_path=source, action=ActionType.WOULD_CLEAN)

        try:
            if entry.path.is_symlink():
                msg = f"Refusing to delete symlink: {source}"
                raise OSError(errno.ELOOP, msg)
            shutil.rmtree(entry.path)
        except OSError as e:
            logger.warning("Failed to delete %s: %s", source, e)
            return ActionRecord(
                section=section,
                source_path=source,
                action=ActionType.SKIP,
                reason="delete failed",
                error=str(e),
            )

        logger.info("Deleted %s", source)
        return ActionRecord(section=section, source_path=source, action=ActionType.CLEANED)

    def _move(self, entry: DirectoryEntry, section: str, archive_path: Path) -> ActionRecord:
        """Move a directory into the archive."""
        source = str(entry.path)
        target = self.resolve_target(entry.path, archive_path)
        self._reserved.add(target)

        if self._simulate:
            logger.info("Dry-run: would move %s -> %s", source, target)
            return ActionRecord(
                section=section,
                source_path=source,
                action=ActionType.WOULD_ARCHIVE,
                target_path=str(target),
            )

        try:
            archive_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create archive %s: %s", archive_path, e)
            return ActionRecord(
                section=section,
                source_path=source,
                action=ActionType.SKIP,
                target_path=str(target),
                reason="archive unavailable",
                error=f"Cannot create archive {archive_path}: {e}",
            )

        try:
            copied = self._relocate(entry.path, target)
        except OSError as e:
            logger.warning("Failed to move %s -> %s: %s", source, target, e)
            return ActionRecord(
                section=section,
                source_path=source,
                action=ActionType.SKIP,
                target_path=str(target),
                reason="move failed",
                error=str(e),
            )

        # The archive copy is complete; only the source is left to remove
        if copied:
            try:
                shutil.rmtree(entry.path)
            except OSError as e:
                logger.warning("Archived %s but could not remove it: %s", source, e)
                return ActionRecord(
                    section=section,
                    source_path=source,
                    action=ActionType.ARCHIVED,
                    target_path=str(target),
                    reason="source not removed",
                    error=f"source not removed: {e}",
                )

        logger.info("Moved %s -> %s", source, target)
        return ActionRecord(
            section=section,
            source_path=source,
            action=ActionType.ARCHIVED,
            target_path=str(target),
        )

    def _relocate(self, source: Path, target: Path) -> bool:
        """Rename source to target, copying when they are on different filesystems.

        Returns:
            True if the tree was copied and the source still has to be removed.
        """
        try:
            source.rename(target)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            logger.debug("%s and %s are on different filesystems, copying", source, target)
            self._copy_across_devices(source, target)
            return True
        return False

    def _copy_across_devices(self, source: Path, target: Path) -> None:
        """Copy a tree into place through a staging name.

        A failed copy removes the staging tree and leaves the source intact.
        """
        staging = target.with_name(f".{target.name}.partial")
        if _exists(staging):
            shutil.rmtree(staging)

        try:
            shutil.copytree(source, staging, symlinks=True)
            staging.rename(target)
        except OSError:
            shutil.rmtree(staging, ignore_errors=True)
            raise


def _exists(path: Path) -> bool:
    """Check for an existing path, counting dangling symlinks."""
    return path.exists() or path.is_symlink()
