# src/bgrotate/guard.py: Single-instance guard and the lock record.
# The running daemon is identified by a lock record: a file created
# exclusively at startup that holds the daemon's PID and is removed on exit.
# The file is managed through filelock's SoftFileLock, whose lock is the
# existence of the file itself. A second invocation uses the same record to
# find the daemon and send it the advance signal.

import atexit
import os
from pathlib import Path

from filelock import SoftFileLock, Timeout

from .interrupt import ADVANCE_SIGNAL
from .util.errors import AlreadyRunningError, NotRunningError
from .util.log import get_logger

logger = get_logger(__name__)

class InstanceGuard:
    """
    Owns the lock record for the lifetime of the daemon.

    Use it as a context manager around the rotation loop. The release is also
    registered with atexit, so the record disappears on any interpreter exit,
    not only when the with-block unwinds.
    """

    def __init__(self, lock_path: Path):
        self.lock_path = Path(lock_path)
        self._lock = SoftFileLock(str(self.lock_path))

    @property
    def is_acquired(self) -> bool:
        return self._lock.is_locked

    def ensure_not_running(self) -> None:
        """
        Fail early if a lock record already exists.

        acquire() remains the authoritative check; this lets callers refuse to
        start before doing any other work.

        Raises:
            AlreadyRunningError: If the record already exists.
        """
        if self.lock_path.exists():
            raise AlreadyRunningError(
                f"{self.lock_path} exists. Delete the file if bgrotate is not running."
            )

    def acquire(self) -> None:
        """
        Create the lock record and write our PID into it.

        Raises:
            AlreadyRunningError: If the record already exists.
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._lock.acquire(blocking=False)
        except Timeout:
            raise AlreadyRunningError(
                f"{self.lock_path} exists. Delete the file if bgrotate is not running."
            )
        self.lock_path.write_text(f"{os.getpid()}\n")
        atexit.register(self.release)
        logger.info(f"Lock acquired at {self.lock_path} (PID {os.getpid()}).")

    def release(self) -> None:
        """Remove the lock record if this guard holds it. Safe to call twice."""
        atexit.unregister(self.release)
        if self._lock.is_locked:
            self._lock.release(force=True)
            logger.info(f"Lock released at {self.lock_path}.")

    def __enter__(self) -> "InstanceGuard":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False

    def read_pid(self) -> int:
        """
        Return the PID stored in the lock record.

        Raises:
            NotRunningError: If the record is missing or holds no valid PID.
        """
        try:
            content = self.lock_path.read_text()
        except FileNotFoundError:
            raise NotRunningError(
                f"bgrotate doesn't appear to be running. {self.lock_path} not found."
            )
        try:
            return int(content.split()[0])
        except (IndexError, ValueError):
            raise NotRunningError(f"{self.lock_path} does not contain a valid PID.")

    def request_advance(self) -> int:
        """
        Ask the running daemon to start its next rotation pass now.

        Returns the PID that was signalled. Does not wait for the rotation.

        Raises:
            NotRunningError: If there is no lock record or it is stale.
        """
        pid = self.read_pid()
        try:
            os.kill(pid, ADVANCE_SIGNAL)
        except ProcessLookupError:
            raise NotRunningError(
                f"No process with PID {pid}. Delete {self.lock_path} if bgrotate is not running."
            )
        except PermissionError:
            # The PID was reused by a process we may not signal.
            raise NotRunningError(
                f"PID {pid} is not a bgrotate process we can signal. "
                f"Delete {self.lock_path} if bgrotate is not running."
            )
        return pid
