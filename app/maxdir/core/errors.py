"""Exception hierarchy for maxdir.

Only LockHeldError is meant to abort a run. Everything else is caught
at the section or entry level and turned into audit log lines.
"""

from pathlib import Path


class MaxdirError(Exception):
    """Base exception for all maxdir errors."""


class ConfigError(MaxdirError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file is not valid TOML."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration content does not match the schema."""


class InventoryError(MaxdirError):
    """Raised when a section root cannot be listed.

    Attributes:
        root: The section root that could not be listed.
    """

    def __init__(self, root: Path, message: str) -> None:
        super().__init__(message)
        self.root = root


class LockHeldError(MaxdirError):
    """Raised when the run lock already exists.

    Attributes:
        lock_path: Location of the existing lock file.
        holder_pid: PID read from the lock file, if it could be read.
    """

    def __init__(self, lock_path: Path, holder_pid: int | None = None) -> None:
        holder = f" (pid {holder_pid})" if holder_pid is not None else ""
        super().__init__(f"Lock file {lock_path} exists{holder}, another instance may be running")
        self.lock_path = lock_path
        self.holder_pid = holder_pid
