"""
Global lock manager for gadget mount/unmount operations.
Uses file-based locking so only one process detaches and rewires the
USB gadget at a time.
"""

import os
import fcntl
import time
import errno
from contextlib import contextmanager
from typing import Optional

from usbdrive.exceptions import IOFailureException, LockTimeoutException
from usbdrive.utils.logger import get_logger

LOG = get_logger(__name__)


class GadgetLockManager:
    """
    Manages the global gadget lock.
    Uses file-based locking (flock) for cross-process synchronization.
    """

    DEFAULT_LOCK_DIR = '/run/lock/usbdrive'
    LOCK_TIMEOUT = 30
    POLL_INTERVAL = 0.1

    def __init__(self, lock_dir: Optional[str] = None, timeout: float = LOCK_TIMEOUT):
        """
        Initialize the lock manager.

        Args:
            lock_dir: Directory to store lock files
            timeout: Maximum time to wait for lock acquisition in seconds
        """
        self.lock_dir = lock_dir or self.DEFAULT_LOCK_DIR
        self.timeout = timeout

    def lock_path(self, operation: str) -> str:
        return os.path.join(self.lock_dir, f"usbdrive_{operation}.lock")

    @contextmanager
    def acquire_lock(self, operation: str = 'gadget'):
        """
        Context manager to hold the gadget lock.

        Args:
            operation: Name of the lock (used in lock filename)

        Yields:
            bool: True once the lock is held

        Raises:
            LockTimeoutException: If the lock cannot be acquired within timeout
            IOFailureException: If the lock file cannot be created or locked

        Example:
            with lock_manager.acquire_lock():
                driver.mount(image, opts)
        """
        path = self.lock_path(operation)
        try:
            os.makedirs(self.lock_dir, mode=0o755, exist_ok=True)
        except OSError as e:
            raise IOFailureException(f"lock {path}: {e}") from e

        try:
            lock_file = open(path, 'w')
        except OSError as e:
            raise IOFailureException(f"lock {path}: {e}") from e

        acquired = False

        try:
            start_time = time.monotonic()
            while True:
                try:
                    fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    acquired = True
                    LOG.info(f"Acquired lock for {operation}")
                    break
                except OSError as e:
                    if e.errno not in (errno.EAGAIN, errno.EWOULDBLOCK):
                        raise IOFailureException(f"lock {path}: {e}") from e

                    elapsed = time.monotonic() - start_time
                    if elapsed >= self.timeout:
                        raise LockTimeoutException(
                            f"Could not acquire lock for {operation} "
                            f"after {self.timeout} seconds; "
                            f"another usbdrive process may be running"
                        )

                    LOG.debug(f"Waiting for lock on {operation} ({elapsed:.1f}s elapsed)...")
                    time.sleep(self.POLL_INTERVAL)

            yield True

        finally:
            if acquired:
                try:
                    fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
                    LOG.info(f"Released lock for {operation}")
                except OSError as e:
                    LOG.error(f"Error releasing lock: {e}")

            lock_file.close()
