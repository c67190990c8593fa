"""Run lock preventing concurrent cleanup runs.

The lock is a marker file holding the PID of the running instance.
Its existence alone is the interlock: a second instance that finds it
refuses to start and never removes it.

Example:
    >>> with RunLock(Path("/glftpd/tmp/maxdir_cleanup.lock")):
    ...     # Process sections
    ...     pass
"""

import contextlib
import logging
import os
import signal
import threading
from collections.abc import Iterator
from pathlib import Path
from types import FrameType

from maxdir.core.errors import LockHeldError
from maxdir.core.paths import ensure_lock_dir

logger = logging.getLogger(__name__)

LOCK_FILE_MODE = 0o644

# Signals turned into RunTerminated while a run holds the lock
TERMINATION_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGHUP)


class RunTerminated(SystemExit):
    """Raised inside the run when a termination signal arrives.

    Subclasses SystemExit so the process still exits, but only after
    the lock's context manager has released it.
    """

    def __init__(self, signum: int) -> None:
        super().__init__(128 + signum)
        self.signum = signum


class RunLock:
    """Exclusive marker file for the duration of one run.

    Attributes:
        path: Location of the lock file.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.pid = os.getpid()
        self._owned = False

    @property
    def acquired(self) -> bool:
        """Whether this instance created the lock file."""
        return self._owned

    def acquire(self) -> None:
        """Create the lock file.

        Creation uses O_EXCL, so two instances starting at the same
        moment cannot both succeed. Termination signals are blocked
        until ownership is recorded; one arriving in between is handled
        once the mask is restored, and the file is removed again.

        Raises:
            LockHeldError: If the lock file already exists.
            RuntimeError: If the lock directory or file cannot be created or written.
        """
        ensure_lock_dir(self.path)

        try:
            fd = self._create()
            with os.fdopen(fd, "w", encoding="ascii") as f:
                f.write(f"{self.pid}\n")
            # Applied explicitly, the umask may have narrowed the creation mode
            os.chmod(self.path, LOCK_FILE_MODE)
        except LockHeldError:
            raise
        except OSError as e:
            self.release()
            msg = f"Cannot create lock file {self.path}: {e}"
            raise RuntimeError(msg) from e
        except BaseException:
            self.release()
            raise

        logger.debug("Acquired run lock %s (pid %d)", self.path, self.pid)

    def _create(self) -> int:
        """Create the lock file and mark it as owned, with termination signals blocked."""
        previous = signal.pthread_sigmask(signal.SIG_BLOCK, TERMINATION_SIGNALS)
        try:
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, LOCK_FILE_MODE)
            except FileExistsError:
                raise LockHeldError(self.path, self._read_holder_pid()) from None
            self._owned = True
        finally:
            signal.pthread_sigmask(signal.SIG_SETMASK, previous)
        return fd

    def release(self) -> None:
        """Remove the lock file if this instance created it."""
        if not self._owned:
            return
        self._owned = False
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove lock file %s: %s", self.path, e)
            return
        logger.debug("Released run lock %s", self.path)

    def _read_holder_pid(self) -> int | None:
        """Read the PID of the instance holding the lock, if possible."""
        try:
            return int(self.path.read_text(encoding="ascii").strip())
        except (OSError, ValueError):
            return None

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


def _raise_terminated(signum: int, frame: FrameType | None) -> None:
    logger.warning("Received signal %d, stopping run", signum)
    raise RunTerminated(signum)


@contextlib.contextmanager
def terminate_on_signals(
    signals: tuple[signal.Signals, ...] = TERMINATION_SIGNALS,
) -> Iterator[None]:
    """Turn termination signals into RunTerminated for the enclosed block.

    Without this, SIGTERM ends the interpreter without unwinding, and
    the lock file would be left behind. Previous handlers are restored
    on exit. Outside the main thread signal handlers cannot be set, and
    the block runs unchanged.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {sig: signal.signal(sig, _raise_terminated) for sig in signals}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
