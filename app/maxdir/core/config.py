"""Configuration models and TOML I/O.

The configuration describes the process-wide action mode, the audit log
and lock locations, the protected path set, and the ordered list of
sections to enforce. It is loaded once per run and never mutated;
command-line overrides produce a copy.

Example config.toml:

    sandbox = true
    action = "move"
    log_file = "/glftpd/ftp-data/logs/maxdirectory.log"
    lock_file = "/glftpd/tmp/maxdir_cleanup.lock"

    [[sections]]
    name = "X265"
    path = "/glftpd/site/X265"
    max_directories = 80
    archive_path = "/glftpd/site/_ARCHiVE/X265-2160P"
"""

import os
import tomllib
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from maxdir.core.errors import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)
from maxdir.core.paths import get_config_path

DEFAULT_LOG_FILE = Path("/glftpd/ftp-data/logs/maxdirectory.log")
DEFAULT_LOCK_FILE = Path("/glftpd/tmp/maxdir_cleanup.lock")

DEFAULT_EXCLUDED_PATHS: tuple[str, ...] = (
    "/glftpd",
    "/_ARCHiVE",
    "/ARCHiVE",
    "/PRE",
    "/_PRE",
)

# Never mutated, whatever the sections say
DEFAULT_PROTECTED_ANCHORS: tuple[str, ...] = (
    "/",
    "/glftpd",
    "/glftpd/site",
)

DEFAULT_ARCHIVE_DIR_NAME = "_ARCHiVE"


class CleanupAction(str, Enum):
    """What happens to directories above the quota.

    Attributes:
        DELETE: Remove the directory tree permanently.
        MOVE: Relocate the directory into the section's archive path.
    """

    DELETE = "delete"
    MOVE = "move"


def _require_absolute(value: Path | None) -> Path | None:
    if value is not None and not value.is_absolute():
        msg = f"path must be absolute, got {str(value)!r}"
        raise ValueError(msg)
    return value


class SectionConfig(BaseModel):
    """A single section subject to a directory quota.

    Attributes:
        name: Section name used in log lines.
        path: Absolute section root whose immediate subdirectories are counted.
        max_directories: Maximum number of immediate subdirectories to keep.
        archive_path: Absolute archive destination (required in move mode).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Annotated[str, Field(min_length=1, description="Section name")]
    path: Annotated[Path, Field(description="Absolute section root")]
    max_directories: Annotated[int, Field(ge=0, description="Directory quota")]
    archive_path: Annotated[
        Path | None,
        Field(description="Archive destination for move mode"),
    ] = None

    @field_validator("path", "archive_path")
    @classmethod
    def validate_absolute(cls, v: Path | None) -> Path | None:
        """Validate that configured paths are absolute."""
        return _require_absolute(v)


class MaxdirConfig(BaseModel):
    """Complete maxdir configuration.

    Attributes:
        sandbox: If True, decisions are logged but nothing is changed.
        action: Action applied to directories above the quota.
        log_file: Append-only audit log.
        lock_file: Marker file preventing concurrent runs.
        excluded_paths: Absolute paths and glob patterns that are never touched.
        protected_anchors: Paths protected unconditionally.
        archive_dir_name: Directory name that is never treated as a candidate.
        sections: Sections in processing order.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    sandbox: Annotated[bool, Field(description="Dry-run mode")] = True
    action: Annotated[CleanupAction, Field(description="Cleanup action")] = CleanupAction.MOVE
    log_file: Annotated[Path, Field(description="Audit log file")] = DEFAULT_LOG_FILE
    lock_file: Annotated[Path, Field(description="Run lock file")] = DEFAULT_LOCK_FILE
    excluded_paths: Annotated[
        tuple[str, ...],
        Field(description="Paths and patterns that are never touched"),
    ] = DEFAULT_EXCLUDED_PATHS
    protected_anchors: Annotated[
        tuple[str, ...],
        Field(description="Unconditionally protected paths"),
    ] = DEFAULT_PROTECTED_ANCHORS
    archive_dir_name: Annotated[
        str,
        Field(min_length=1, description="Archive directory name"),
    ] = DEFAULT_ARCHIVE_DIR_NAME
    sections: Annotated[
        tuple[SectionConfig, ...],
        Field(description="Sections in processing order"),
    ] = ()

    @field_validator("log_file", "lock_file")
    @classmethod
    def validate_absolute(cls, v: Path) -> Path:
        """Validate that log and lock locations are absolute."""
        _require_absolute(v)
        return v

    @model_validator(mode="after")
    def validate_sections(self) -> "MaxdirConfig":
        """Validate section names and archive paths against the action."""
        seen: set[str] = set()
        for section in self.sections:
            if section.name in seen:
                msg = f"Duplicate section name: {section.name}"
                raise ValueError(msg)
            seen.add(section.name)
            if self.action == CleanupAction.MOVE and section.archive_path is None:
                msg = f"Section {section.name!r} needs archive_path when action is 'move'"
                raise ValueError(msg)
        return self

    @property
    def simulate(self) -> bool:
        """Whether this configuration describes a dry run."""
        return self.sandbox


def default_config() -> MaxdirConfig:
    """Build the example configuration written by ``maxdir config init``.

    Returns:
        MaxdirConfig with two sample sections in sandbox mode.
    """
    return MaxdirConfig(
        sections=(
            SectionConfig(
                name="X265",
                path=Path("/glftpd/site/X265"),
                max_directories=80,
                archive_path=Path("/glftpd/site/_ARCHiVE/X265-2160P"),
            ),
            SectionConfig(
                name="TV-NL",
                path=Path("/glftpd/site/TV-NL"),
                max_directories=50,
                archive_path=Path("/glftpd/site/_ARCHiVE/TV-X264NL"),
            ),
        ),
    )


def _config_to_dict(config: MaxdirConfig) -> dict[str, Any]:
    """Convert a configuration to a TOML-serializable dictionary."""
    return config.model_dump(mode="json", exclude_none=True)


def config_to_toml(config: MaxdirConfig) -> str:
    """Serialize a configuration to TOML text.

    Args:
        config: Configuration to serialize.

    Returns:
        TOML document.
    """
    return tomli_w.dumps(_config_to_dict(config))


def load_config(path: Path | None = None) -> MaxdirConfig:
    """Load and validate a configuration file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated MaxdirConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigParseError(f"Failed to read config {config_path}: {e}") from e

    try:
        return MaxdirConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config {config_path}: {e}") from e


def save_config(config: MaxdirConfig, path: Path | None = None) -> Path:
    """Save a configuration to a TOML file.

    The file is written to a temporary file in the same directory and
    moved into place with os.replace(). The temporary file is removed
    on failure.

    Args:
        config: The configuration to save.
        path: Destination. If None, uses the default config path.

    Returns:
        Path where the configuration was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        # Write atomically using a temporary file in the same directory
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(_config_to_dict(config), f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def require_config(config_path: Path | None = None) -> MaxdirConfig:
    """Load configuration or exit with helpful error message.

    This is a convenience wrapper around load_config() for CLI commands.

    Args:
        config_path: Optional custom config path.

    Returns:
        Loaded and validated MaxdirConfig.

    Raises:
        typer.Exit: With code 2 if the configuration cannot be loaded.
    """
    import typer

    from maxdir.utils.formatting import print_error, print_info

    path = config_path or get_config_path()
    try:
        return load_config(path)
    except ConfigNotFoundError as e:
        print_error(f"Config not found: {path}")
        print_info("Run 'maxdir config init' to create an example configuration.")
        raise typer.Exit(code=2) from e
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=2) from e
