"""Unit tests for run command.

Tests for the CLI run command implementation.
"""

import errno
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from maxdir.cli.main import app
from maxdir.core.config import CleanupAction, MaxdirConfig, SectionConfig, save_config
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def section(tmp_path: Path) -> SectionConfig:
    """X265 section with a quota of five."""
    return SectionConfig(
        name="X265",
        path=tmp_path / "site" / "X265",
        max_directories=5,
        archive_path=tmp_path / "site" / "_ARCHiVE" / "X265-2160P",
    )


@pytest.fixture
def releases(
    section: SectionConfig,
    make_tree: Callable[..., list[Path]],
    release_names: list[str],
) -> list[Path]:
    """Eight releases in the X265 section, oldest first."""
    return make_tree(section.path, release_names)


def _write_config(tmp_path: Path, config: MaxdirConfig) -> Path:
    return save_config(config, tmp_path / "config.toml")


class TestRunCommandHelp:
    """Tests for run command help."""

    def test_run_help(self) -> None:
        """Run command shows its options."""
        result = runner.invoke(app, ["run", "--help"])
        assert result.exit_code == 0
        assert "--dry-run" in result.output
        assert "--action" in result.output


class TestRunCommand:
    """Tests for run command execution."""

    def test_live_delete(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """A live run deletes the excess directories."""
        config_file = _write_config(tmp_path, make_config([section]))

        result = runner.invoke(app, ["run", "-c", str(config_file)])

        assert result.exit_code == 0
        assert [p.exists() for p in releases] == [False] * 3 + [True] * 5
        assert "3 directories processed." in result.output

    def test_sandbox_from_config(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """A sandboxed config changes nothing."""
        config_file = _write_config(tmp_path, make_config([section], sandbox=True))

        result = runner.invoke(app, ["run", "-c", str(config_file)])

        assert result.exit_code == 0
        assert all(p.exists() for p in releases)
        assert "Sandbox: 3 directories would be processed." in result.output

    def test_dry_run_override(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """--dry-run overrides a live config."""
        config = make_config([section])
        config_file = _write_config(tmp_path, config)

        result = runner.invoke(app, ["run", "-c", str(config_file), "--dry-run"])

        assert result.exit_code == 0
        assert all(p.exists() for p in releases)
        assert "SANDBOX: Would clean" in config.log_file.read_text()

    def test_action_override(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """--action move overrides a delete config."""
        config_file = _write_config(tmp_path, make_config([section]))

        result = runner.invoke(app, ["run", "-c", str(config_file), "-a", "move"])

        assert result.exit_code == 0
        assert section.archive_path is not None
        assert sorted(p.name for p in section.archive_path.iterdir()) == sorted(
            p.name for p in releases[:3]
        )

    def test_invalid_override(
        self,
        tmp_path: Path,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """Switching to move mode without archive paths is a config error."""
        section = SectionConfig(name="X265", path=releases[0].parent, max_directories=5)
        config_file = _write_config(tmp_path, make_config([section]))

        result = runner.invoke(app, ["run", "-c", str(config_file), "-a", "move"])

        assert result.exit_code == 2
        assert all(p.exists() for p in releases)

    def test_missing_config(self, tmp_path: Path) -> None:
        """A missing config exits with code 2."""
        result = runner.invoke(app, ["run", "-c", str(tmp_path / "missing.toml")])

        assert result.exit_code == 2
        assert "maxdir config init" in result.output

    def test_lock_held(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """A held lock exits with code 1 and changes nothing."""
        config = make_config([section])
        config_file = _write_config(tmp_path, config)
        config.lock_file.parent.mkdir(parents=True)
        config.lock_file.write_text("999\n")

        result = runner.invoke(app, ["run", "-c", str(config_file)])

        assert result.exit_code == 1
        assert all(p.exists() for p in releases)
        assert config.lock_file.exists()
        assert "Lockfile exists" in config.log_file.read_text()

    def test_lock_not_creatable(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """A lock file that cannot be created is a setup error with code 2."""
        config = make_config([section])
        config_file = _write_config(tmp_path, config)
        real_open = os.open

        def deny_lock(path: Path, *args: Any, **kwargs: Any) -> int:
            if Path(path) == config.lock_file:
                raise PermissionError(errno.EACCES, "Permission denied")
            return real_open(path, *args, **kwargs)

        with patch("maxdir.cleanup.lock.os.open", side_effect=deny_lock):
            result = runner.invoke(app, ["run", "-c", str(config_file)])

        assert result.exit_code == 2
        assert "Cannot start run" in result.output
        assert all(p.exists() for p in releases)
        assert not config.lock_file.exists()

    def test_creates_log_file(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """The audit log and its directory are created before the run."""
        log_file = tmp_path / "ftp-data" / "logs" / "maxdirectory.log"
        config_file = _write_config(tmp_path, make_config([section], log_file=log_file))

        result = runner.invoke(app, ["run", "-c", str(config_file)])

        assert result.exit_code == 0
        assert "MAXDIRLOGDONE" in log_file.read_text()

    def test_no_sections(self, tmp_path: Path, make_config: Callable[..., MaxdirConfig]) -> None:
        """A config without sections runs and says so."""
        config_file = _write_config(tmp_path, make_config())

        result = runner.invoke(app, ["run", "-c", str(config_file)])

        assert result.exit_code == 0
        assert "No sections configured." in result.output


class TestRunOutput:
    """Tests for run command output options."""

    def test_json_output(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """--format json prints the report as JSON."""
        config_file = _write_config(tmp_path, make_config([section], sandbox=True))

        result = runner.invoke(app, ["run", "-c", str(config_file), "--format", "json"])

        assert result.exit_code == 0
        assert '"simulate": true' in result.output
        assert '"processed": 3' in result.output
        assert '"would_clean"' in result.output

    def test_quiet(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """--quiet suppresses tables and the summary."""
        config_file = _write_config(tmp_path, make_config([section]))

        result = runner.invoke(app, ["--quiet", "run", "-c", str(config_file)])

        assert result.exit_code == 0
        assert "directories processed" not in result.output
        assert not releases[0].exists()

    def test_table_output(
        self,
        tmp_path: Path,
        section: SectionConfig,
        releases: list[Path],
        make_config: Callable[..., MaxdirConfig],
    ) -> None:
        """The default output shows the records and sections tables."""
        config_file = _write_config(
            tmp_path,
            make_config([section], sandbox=True, action=CleanupAction.MOVE),
        )

        result = runner.invoke(app, ["run", "-c", str(config_file)])

        assert result.exit_code == 0
        assert "Cleanup Actions (Sandbox)" in result.output
        assert "Sections (Sandbox)" in result.output


class TestVersion:
    """Tests for global options."""

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "maxdir version" in result.output
