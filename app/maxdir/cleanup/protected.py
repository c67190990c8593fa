"""Protected paths that must never be deleted or moved.

A path is protected when it is one of the configured anchors (the
filesystem root, the glftpd root and its site directory by default),
when it matches an entry of the excluded path set, or when its final
component is the archive directory name.

Excluded entries without glob metacharacters match exactly, so
"/glftpd/site" protects the site directory itself but not the release
directories below it. Entries containing "*", "?" or "[" are matched
with fnmatch.

The check is applied to the section root before scanning and again to
each candidate right before it is touched.
"""

import fnmatch
import os
from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from maxdir.core.config import (
    DEFAULT_ARCHIVE_DIR_NAME,
    DEFAULT_EXCLUDED_PATHS,
    DEFAULT_PROTECTED_ANCHORS,
    MaxdirConfig,
)

_GLOB_CHARS = frozenset("*?[")


class ProtectionReason(str, Enum):
    """Why a path is protected.

    Attributes:
        NOT_ABSOLUTE: Relative paths are never acted upon.
        ANCHOR: Path is one of the unconditionally protected anchors.
        EXCLUDED: Path matches the excluded path set.
        ARCHIVE_DIR: Final component is the archive directory name.
    """

    NOT_ABSOLUTE = "not_absolute"
    ANCHOR = "anchor"
    EXCLUDED = "excluded"
    ARCHIVE_DIR = "archive_dir"


def _normalize(path: str) -> str:
    # normpath keeps a leading "//" (POSIX allows it to mean something else)
    normalized = os.path.normpath(path)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


class SafetyGuard:
    """Classifies absolute paths as protected or mutable.

    Pure predicate with no side effects besides resolving symlinks of
    the checked path.

    Args:
        excluded_paths: Absolute paths and glob patterns that are never touched.
        anchors: Paths protected unconditionally.
        archive_dir_name: Directory name that is never a cleanup candidate.
    """

    def __init__(
        self,
        excluded_paths: Iterable[str] = DEFAULT_EXCLUDED_PATHS,
        anchors: Iterable[str] = DEFAULT_PROTECTED_ANCHORS,
        archive_dir_name: str = DEFAULT_ARCHIVE_DIR_NAME,
    ) -> None:
        literals: set[str] = set()
        patterns: list[str] = []
        for entry in excluded_paths:
            if _GLOB_CHARS.intersection(entry):
                patterns.append(entry)
            else:
                literals.add(_normalize(entry))

        self._literals = frozenset(literals)
        self._patterns = tuple(patterns)
        self._anchors = frozenset(_normalize(a) for a in anchors)
        self._archive_dir_name = archive_dir_name

    @classmethod
    def from_config(cls, config: MaxdirConfig) -> "SafetyGuard":
        """Build a guard from the protection settings of a configuration."""
        return cls(
            excluded_paths=config.excluded_paths,
            anchors=config.protected_anchors,
            archive_dir_name=config.archive_dir_name,
        )

    @property
    def archive_dir_name(self) -> str:
        """Directory name that is never treated as a candidate."""
        return self._archive_dir_name

    def check(self, path: str | Path) -> ProtectionReason | None:
        """Classify a path.

        Both the path as given and its symlink-resolved form are
        checked, so a link pointing at a protected location is
        protected too.

        Args:
            path: Absolute path to check.

        Returns:
            The reason the path is protected, or None if it may be mutated.
        """
        raw = str(path)
        if not os.path.isabs(raw):
            return ProtectionReason.NOT_ABSOLUTE

        normalized = _normalize(raw)
        reason = self._check_normalized(normalized)
        if reason is not None:
            return reason

        resolved = os.path.realpath(normalized)
        if resolved != normalized:
            return self._check_normalized(resolved)
        return None

    def is_protected(self, path: str | Path) -> bool:
        """Check if a path must not be deleted or moved.

        Args:
            path: Absolute path to check.

        Returns:
            True if the path is protected, False otherwise.
        """
        return self.check(path) is not None

    def _check_normalized(self, path: str) -> ProtectionReason | None:
        if path in self._anchors:
            return ProtectionReason.ANCHOR
        if path in self._literals:
            return ProtectionReason.EXCLUDED
        for pattern in self._patterns:
            if fnmatch.fnmatch(path, pattern):
                return ProtectionReason.EXCLUDED
        if os.path.basename(path) == self._archive_dir_name:
            return ProtectionReason.ARCHIVE_DIR
        return None
