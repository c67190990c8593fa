"""Retention policy: which directories exceed a section's quota."""

from collections.abc import Sequence

from maxdir.cleanup.models import DirectoryEntry


def excess_count(total: int, max_directories: int) -> int:
    """Number of directories above the quota.

    Args:
        total: Number of directories in the section.
        max_directories: Configured quota.

    Returns:
        max(0, total - max_directories).

    Raises:
        ValueError: If the quota is negative.
    """
    if max_directories < 0:
        msg = f"Quota cannot be negative, got {max_directories}"
        raise ValueError(msg)
    return max(0, total - max_directories)


def select_excess(
    inventory: Sequence[DirectoryEntry],
    max_directories: int,
) -> list[DirectoryEntry]:
    """Select the directories to act on.

    The inventory must be ordered oldest first. The result is the prefix
    of the oldest ``len(inventory) - max_directories`` entries, in the
    same order, or an empty list when the section is within its quota.

    Protected directories are not filtered here. They stay in the
    selection and are skipped individually by the caller, so a
    protected directory never causes a newer one to be selected in its
    place.

    Args:
        inventory: Directory entries, oldest first.
        max_directories: Configured quota.

    Returns:
        Entries to act on, oldest first.

    Raises:
        ValueError: If the quota is negative.
    """
    count = excess_count(len(inventory), max_directories)
    return list(inventory[:count])
