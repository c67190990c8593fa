"""Directory inventory of a section root.

Lists the immediate subdirectories of a section, oldest first. Files,
symlinks (to files or directories) and deeper descendants are not part
of the inventory.
"""

import logging
from pathlib import Path

from maxdir.cleanup.models import DirectoryEntry
from maxdir.core.errors import InventoryError

logger = logging.getLogger(__name__)


def _sort_key(entry: DirectoryEntry) -> tuple[float, str]:
    return (entry.modified_at, str(entry.path))


class DirectoryInventory:
    """Takes snapshots of a section's immediate subdirectories."""

    def scan(self, root: Path) -> list[DirectoryEntry]:
        """List the immediate subdirectories of a section root.

        Entries are ordered by modification time, oldest first, with
        ties broken by path so the order is deterministic. Each call
        returns a fresh, independent snapshot.

        Args:
            root: Section root directory.

        Returns:
            DirectoryEntry list ordered oldest first.

        Raises:
            InventoryError: If the root is missing, not a directory, or unreadable.
        """
        if not root.exists():
            raise InventoryError(root, f"Directory does not exist: {root}")
        if not root.is_dir():
            raise InventoryError(root, f"Not a directory: {root}")

        try:
            children = list(root.iterdir())
        except OSError as e:
            raise InventoryError(root, f"Cannot list {root}: {e}") from e

        entries: list[DirectoryEntry] = []
        for child in children:
            entry = self._to_entry(child)
            if entry is not None:
                entries.append(entry)

        entries.sort(key=_sort_key)
        logger.debug("Found %d directories in %s", len(entries), root)
        return entries

    def _to_entry(self, path: Path) -> DirectoryEntry | None:
        """Build an entry for a directory child, or None to leave it out.

        Checks for symlinks first, because is_dir() follows them.
        """
        try:
            if path.is_symlink() or not path.is_dir():
                return None
            stat = path.lstat()
        except OSError as e:
            # Removed or made unreadable between listing and stat
            logger.warning("Cannot stat %s: %s", path, e)
            return None

        return DirectoryEntry(path=path, modified_at=stat.st_mtime)
