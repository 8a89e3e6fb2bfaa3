"""
Cache directory management for protogo.

Directory Structure:
    Cache root (PROTOGO_CACHE or <user cache dir>/protogo):
        - protoc-<version>/bin/protoc : protobuf compiler installations
        - flatc-<version>/flatc       : flatbuffers compiler installations
        - .locks/                     : install lock files

The user cache directory follows the platform convention:
    - Windows: %LOCALAPPDATA%
    - macOS:   ~/Library/Caches
    - Linux:   $XDG_CACHE_HOME or ~/.cache
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from protogo.core.exceptions import CacheDirectoryError

logger = logging.getLogger(__name__)

CACHE_SUBDIR = "protogo"
LOCK_SUBDIR = ".locks"


def get_user_cache_dir(
    os_name: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> Path:
    """
    Get the platform-specific user cache directory.

    Args:
        os_name: Go-style OS name (detected if None)
        environ: Environment mapping (os.environ if None)

    Returns:
        Path to the user cache directory

    Raises:
        CacheDirectoryError: If the directory cannot be determined

    Example:
        >>> get_user_cache_dir("linux", {"XDG_CACHE_HOME": "/var/cache/me"})
        PosixPath('/var/cache/me')
    """
    if os_name is None:
        from protogo.core.platform import detect_platform

        os_name = detect_platform().os
    if environ is None:
        environ = os.environ

    if os_name == "windows":
        local_app_data = environ.get("LOCALAPPDATA")
        if not local_app_data:
            raise CacheDirectoryError(
                "LOCALAPPDATA environment variable is not set. "
                "User cache directory couldn't be resolved."
            )
        return Path(local_app_data)

    try:
        home = Path(environ["HOME"]) if environ.get("HOME") else Path.home()
    except RuntimeError as e:
        raise CacheDirectoryError(
            f"User home directory couldn't be resolved: {e}"
        ) from e

    if os_name == "darwin":
        return home / "Library" / "Caches"

    xdg_cache = environ.get("XDG_CACHE_HOME")
    if xdg_cache and Path(xdg_cache).is_absolute():
        return Path(xdg_cache)
    return home / ".cache"


def get_cache_root(override: Optional[str] = None) -> Path:
    """
    Get the protogo cache root without creating it.

    Args:
        override: Explicit cache directory (e.g., from PROTOGO_CACHE)

    Returns:
        Cache root path
    """
    if override:
        return Path(override).expanduser()
    return get_user_cache_dir() / CACHE_SUBDIR


def ensure_cache_root(override: Optional[str] = None) -> Path:
    """
    Resolve the cache root and create it if it doesn't exist.

    Args:
        override: Explicit cache directory (e.g., from PROTOGO_CACHE)

    Returns:
        Existing cache root path

    Raises:
        CacheDirectoryError: If the directory cannot be created
    """
    cache_dir = get_cache_root(override)

    logger.debug(f"Creating cache dir: {cache_dir}")
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CacheDirectoryError(
            f"Could not create cache directory in '{cache_dir}' root: {e}"
        ) from e

    logger.debug("Cache dir created!")
    return cache_dir


def get_lock_dir(cache_root: Path) -> Path:
    """Get the directory holding install lock files."""
    return Path(cache_root) / LOCK_SUBDIR


__all__ = [
    "get_user_cache_dir",
    "get_cache_root",
    "ensure_cache_root",
    "get_lock_dir",
    "CACHE_SUBDIR",
]
