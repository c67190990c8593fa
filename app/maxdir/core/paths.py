"""Path management for maxdir.

This module provides the default configuration location (XDG Base
Directory aware) and the helpers that prepare the audit log file and
the lock directory before a run.

Defaults:
- Config: $MAXDIR_CONFIG, else ~/.config/maxdir/config.toml
- Theme:  ~/.config/maxdir/theme.toml
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# Application identifier for directory naming
APP_NAME = "maxdir"

# Environment variable overriding the config file location
CONFIG_ENV_VAR = "MAXDIR_CONFIG"

# The audit log is shared with glftpd and its bots
LOG_FILE_MODE = 0o666
LOCK_DIR_MODE = 0o755


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/maxdir/ (or XDG_CONFIG_HOME/maxdir/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_config_path() -> Path:
    """Get the default configuration file path.

    The MAXDIR_CONFIG environment variable takes precedence so cron
    entries can point at a system-wide file.

    Returns:
        Path to the configuration file.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/maxdir/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def _chmod(path: Path, mode: int) -> None:
    """Apply permissions, tolerating paths owned by another user."""
    try:
        path.chmod(mode)
    except OSError as e:
        logger.warning("Cannot chmod %s to %o: %s", path, mode, e)


def ensure_log_file(path: Path) -> Path:
    """Create the audit log file and its directory.

    Args:
        path: Audit log file path.

    Returns:
        The log file path.

    Raises:
        RuntimeError: If the directory or file cannot be created.
    """
    _ensure_dir(path.parent, "log")
    try:
        path.touch(exist_ok=True)
    except OSError as e:
        msg = f"Cannot create log file {path}: {e}"
        raise RuntimeError(msg) from e
    _chmod(path, LOG_FILE_MODE)
    return path


def ensure_lock_dir(lock_path: Path) -> Path:
    """Create the directory holding the lock file.

    Args:
        lock_path: Lock file path (its parent is created).

    Returns:
        The lock directory path.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    lock_dir = _ensure_dir(lock_path.parent, "lock")
    _chmod(lock_dir, LOCK_DIR_MODE)
    return lock_dir
