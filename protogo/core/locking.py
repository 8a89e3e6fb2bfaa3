"""
Concurrent access control for protogo.

Parallel build jobs may resolve the same missing compiler version at the same
time. A file lock per (compiler, version) lets exactly one process install it
while the others wait and then observe the finished installation.

Usage:
    from protogo.core.locking import LockManager

    lock_manager = LockManager(cache_root / ".locks")
    with lock_manager.install_lock("protoc-31.0"):
        if not executable.exists():
            install()
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_TIMEOUT = 300


class LockManager:
    """
    Manages install locks inside a lock directory.

    Uses file-based locking with the `filelock` library for cross-platform
    compatibility and automatic cleanup on process death.

    Attributes:
        lock_dir: Directory where lock files are stored
    """

    def __init__(self, lock_dir: Path):
        """
        Initialize lock manager.

        Args:
            lock_dir: Directory for lock files (created if missing)
        """
        self.lock_dir = Path(lock_dir)
        self.lock_dir.mkdir(parents=True, exist_ok=True)

    def lock_path(self, install_id: str) -> Path:
        """Get the lock file path for an installation identifier."""
        safe_id = install_id.replace("/", "-").replace("\\", "-").replace(":", "-")
        return self.lock_dir / f"{safe_id}.lock"

    @contextmanager
    def install_lock(self, install_id: str, timeout: float = DEFAULT_INSTALL_TIMEOUT):
        """
        Acquire lock for installing one compiler version.

        Args:
            install_id: Installation identifier (e.g., 'protoc-31.0')
            timeout: Maximum wait time in seconds (default: 300 for downloads)

        Yields:
            None

        Raises:
            LockTimeout: If lock can't be acquired within timeout
        """
        lock_path = self.lock_path(install_id)
        lock = FileLock(lock_path, timeout=timeout)

        try:
            with lock:
                logger.debug(f"Acquired install lock: {lock_path}")
                yield
                logger.debug(f"Released install lock: {lock_path}")
        except LockTimeout as e:
            logger.error(
                f"Could not acquire install lock for {install_id} after {timeout}s. "
                "Another process may be downloading this compiler."
            )
            raise LockTimeout(str(lock_path)) from e


__all__ = ["LockManager", "LockTimeout"]
