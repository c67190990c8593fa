"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
from maxdir.core.config import CleanupAction, MaxdirConfig, SectionConfig

# Fixed point in time used by clocks in tests (a Monday)
FIXED_NOW = datetime(2026, 1, 5, 3, 0, 1)

# Base mtime for generated directories, one minute apart
BASE_MTIME = 1_700_000_000


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def make_tree() -> Callable[..., list[Path]]:
    """Factory creating release directories with ascending mtimes.

    The first name gets the oldest mtime. Each directory holds a small
    file so deletes and moves operate on real trees.
    """

    def _make(root: Path, names: Sequence[str], start: int = BASE_MTIME) -> list[Path]:
        root.mkdir(parents=True, exist_ok=True)
        paths: list[Path] = []
        for name in names:
            path = root / name
            path.mkdir()
            (path / "release.nfo").write_text(name)
            paths.append(path)
        # Set mtimes last, creating the nfo files touches the directories
        for offset, path in enumerate(paths):
            mtime = start + offset * 60
            os.utime(path, (mtime, mtime))
        return paths

    return _make


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., MaxdirConfig]:
    """Factory building a configuration with log and lock under tmp_path."""

    def _make(
        sections: Sequence[SectionConfig] = (),
        *,
        sandbox: bool = False,
        action: CleanupAction = CleanupAction.DELETE,
        **overrides: Any,
    ) -> MaxdirConfig:
        values: dict[str, Any] = {
            "sandbox": sandbox,
            "action": action,
            "log_file": tmp_path / "maxdirectory.log",
            "lock_file": tmp_path / "run" / "maxdir_cleanup.lock",
            "sections": tuple(sections),
        }
        values.update(overrides)
        return MaxdirConfig(**values)

    return _make


@pytest.fixture
def release_names() -> list[str]:
    """Eight release names, oldest first."""
    return [f"Some.Release.S01E0{i}.2160p.WEB.x265-GRP" for i in range(1, 9)]
