"""Unit tests for the directory inventory.

Tests for listing and ordering the immediate subdirectories of a section.
"""

import os
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
from maxdir.cleanup.inventory import DirectoryInventory
from maxdir.core.errors import InventoryError


@pytest.fixture
def inventory() -> DirectoryInventory:
    """Create an inventory instance."""
    return DirectoryInventory()


class TestScanOrdering:
    """Tests for inventory ordering."""

    def test_oldest_first(
        self,
        tmp_path: Path,
        inventory: DirectoryInventory,
        make_tree: Callable[..., list[Path]],
    ) -> None:
        """Entries are ordered by modification time, oldest first."""
        root = tmp_path / "X265"
        # Names sort opposite to age
        created = make_tree(root, ["c.old", "b.mid", "a.new"])
        for offset, path in enumerate(created):
            os.utime(path, (1_000 + offset, 1_000 + offset))

        entries = inventory.scan(root)

        assert [e.name for e in entries] == ["c.old", "b.mid", "a.new"]
        assert [e.modified_at for e in entries] == [1_000, 1_001, 1_002]

    def test_ties_broken_by_path(
        self,
        tmp_path: Path,
        inventory: DirectoryInventory,
        make_tree: Callable[..., list[Path]],
    ) -> None:
        """Directories with equal mtimes are ordered by path."""
        root = tmp_path / "X265"
        for path in make_tree(root, ["zeta", "alpha", "mu"]):
            os.utime(path, (5_000, 5_000))

        entries = inventory.scan(root)

        assert [e.name for e in entries] == ["alpha", "mu", "zeta"]

    def test_fresh_snapshot_each_call(
        self,
        tmp_path: Path,
        inventory: DirectoryInventory,
        make_tree: Callable[..., list[Path]],
    ) -> None:
        """Each scan reflects the directory at the time of the call."""
        root = tmp_path / "X265"
        make_tree(root, ["one", "two"])

        first = inventory.scan(root)
        (root / "three").mkdir()
        second = inventory.scan(root)

        assert len(first) == 2
        assert len(second) == 3


class TestScanFiltering:
    """Tests for which children are part of the inventory."""

    def test_ignores_files_and_symlinks(
        self,
        tmp_path: Path,
        inventory: DirectoryInventory,
        make_tree: Callable[..., list[Path]],
    ) -> None:
        """Only real immediate subdirectories are counted."""
        root = tmp_path / "X265"
        make_tree(root, ["Release.One", "Release.Two"])
        (root / "README.txt").write_text("not a release")
        (root / "link.dir").symlink_to(tmp_path)
        (root / "link.broken").symlink_to(tmp_path / "missing")

        entries = inventory.scan(root)

        assert sorted(e.name for e in entries) == ["Release.One", "Release.Two"]

    def test_nested_directories_not_counted(
        self,
        tmp_path: Path,
        inventory: DirectoryInventory,
        make_tree: Callable[..., list[Path]],
    ) -> None:
        """Deeper descendants are not part of the inventory."""
        root = tmp_path / "X265"
        (release,) = make_tree(root, ["Release.One"])
        (release / "Sample").mkdir()
        (release / "Subs").mkdir()

        entries = inventory.scan(root)

        assert [e.path for e in entries] == [release]

    def test_empty_root(self, tmp_path: Path, inventory: DirectoryInventory) -> None:
        """An empty section yields an empty inventory."""
        assert inventory.scan(tmp_path) == []


class TestScanErrors:
    """Tests for unusable section roots."""

    def test_missing_root(self, tmp_path: Path, inventory: DirectoryInventory) -> None:
        """A missing root raises InventoryError carrying the root."""
        root = tmp_path / "missing"

        with pytest.raises(InventoryError, match="does not exist") as exc_info:
            inventory.scan(root)

        assert exc_info.value.root == root

    def test_root_is_file(self, tmp_path: Path, inventory: DirectoryInventory) -> None:
        """A root that is a file raises InventoryError."""
        root = tmp_path / "file"
        root.write_text("x")

        with pytest.raises(InventoryError, match="Not a directory"):
            inventory.scan(root)

    def test_unreadable_root(self, tmp_path: Path, inventory: DirectoryInventory) -> None:
        """A listing failure raises InventoryError."""
        with (
            patch.object(Path, "iterdir", side_effect=PermissionError("denied")),
            pytest.raises(InventoryError, match="Cannot list"),
        ):
            inventory.scan(tmp_path)
