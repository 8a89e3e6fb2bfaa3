"""
Cross-platform file system utilities for protogo.

This module provides:
- ZIP extraction guarded against directory traversal (zip-slip)
- Path utilities (containment checks, executable lookup)
- Safe deletion and temporary directory management
"""

import os
import shutil
import stat
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

from protogo.core.exceptions import (
    ArchiveExtractionError,
    InsecureArchiveError,
    InstallError,
)

IS_WINDOWS = os.name == "nt"

DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Comparison is done on path segments, so '/cache-evil' is not considered
    to be under '/cache'.

    Example:
        >>> is_relative_to(Path("/home/user/project/file.txt"), Path("/home/user"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def find_executable(
    name: str, search_paths: Optional[list[Path]] = None
) -> Optional[Path]:
    """
    Find an executable in the system PATH or provided search paths.

    Args:
        name: Executable name (e.g., 'protoc', 'go')
        search_paths: Optional list of directories to search

    Returns:
        Path to executable if found, None otherwise

    Example:
        >>> find_executable('protoc')
        PosixPath('/usr/bin/protoc')
    """
    extensions = [""] if not IS_WINDOWS else ["", ".exe", ".bat", ".cmd"]

    if search_paths is None:
        path_env = os.environ.get("PATH", "")
        search_paths = [Path(p) for p in path_env.split(os.pathsep) if p]

    for directory in search_paths:
        for ext in extensions:
            exe_path = Path(directory) / f"{name}{ext}"
            if exe_path.is_file() and os.access(exe_path, os.X_OK):
                return exe_path

    return None


def make_executable(path: Union[str, Path]) -> None:
    """Add execute permission for everyone who can read the file."""
    path = Path(path)
    mode = path.stat().st_mode
    read_bits = mode & (stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH)
    path.chmod(mode | (read_bits >> 2))


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(name: str, destination: Path) -> Path:
    """
    Resolve an archive member path and ensure it stays inside destination.

    Args:
        name: Member name as stored in the archive
        destination: Resolved extraction destination

    Returns:
        Absolute path the member will be extracted to

    Raises:
        InsecureArchiveError: If the member escapes destination
    """
    member_path = (destination / name).resolve()

    if not is_relative_to(member_path, destination):
        raise InsecureArchiveError(
            f"Archive member '{name}' attempts directory traversal "
            f"outside '{destination}'. Extraction has been blocked."
        )

    return member_path


def _member_mode(info: zipfile.ZipInfo) -> int:
    """Unix permission bits stored for a member, or a sane default."""
    mode = (info.external_attr >> 16) & 0o777
    if mode:
        return mode
    return DEFAULT_DIR_MODE if info.is_dir() else DEFAULT_FILE_MODE


def unzip(archive_path: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Extract a ZIP archive into destination, replacing existing files.

    All member paths are validated before anything is written. Extraction
    stops at the first I/O error; files extracted up to that point are left
    in place.

    Args:
        archive_path: Path to the ZIP archive
        destination: Directory to extract to (created if missing)

    Raises:
        InsecureArchiveError: If a member would land outside destination
        ArchiveExtractionError: If the archive is unreadable or a member
            cannot be written

    Example:
        >>> unzip('/tmp/protoc-31.0-linux-x86_64.zip', '/cache/protoc-31.0')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    try:
        destination.mkdir(parents=True, exist_ok=True)
        destination = destination.resolve()
    except OSError as e:
        raise ArchiveExtractionError(
            f"Error making directory {destination}: {e}"
        ) from e

    try:
        archive = zipfile.ZipFile(archive_path, "r")
    except (OSError, zipfile.BadZipFile) as e:
        raise ArchiveExtractionError(
            f"Error opening archive {archive_path}: {e}"
        ) from e

    with archive:
        members = [
            (info, _validate_archive_path(info.filename, destination))
            for info in archive.infolist()
        ]

        for info, target in members:
            try:
                _extract_member(archive, info, target)
            except (OSError, zipfile.BadZipFile) as e:
                raise ArchiveExtractionError(
                    f"Error extracting {info.filename} to {target}: {e}"
                ) from e


def _extract_member(archive: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path):
    """Write one archive member to target."""
    if info.is_dir():
        target.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
        return

    target.parent.mkdir(mode=DEFAULT_DIR_MODE, parents=True, exist_ok=True)
    with archive.open(info) as source, open(target, "wb") as out:
        shutil.copyfileobj(source, out)

    if not IS_WINDOWS:
        target.chmod(_member_mode(info))


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        InstallError: If deletion fails

    Example:
        >>> safe_rmtree('/tmp/build', require_prefix='/tmp')
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise InstallError(f"Path is not a directory: {path}")

    def handle_remove_readonly(func, failed_path, exc_info):
        """Clear the read-only bit and retry (Windows)."""
        os.chmod(failed_path, stat.S_IWRITE)
        func(failed_path)

    try:
        shutil.rmtree(path, onerror=handle_remove_readonly if IS_WINDOWS else None)
    except OSError as e:
        raise InstallError(f"Failed to remove directory '{path}': {e}") from e


# ============================================================================
# Temporary File/Directory Management
# ============================================================================


@contextmanager
def temporary_directory(prefix: str = "protogo_", cleanup: bool = True):
    """
    Context manager for temporary directory with automatic cleanup.

    The directory is created in the system temporary location.

    Args:
        prefix: Prefix for temp directory name
        cleanup: If True, remove directory on exit

    Yields:
        Path to temporary directory

    Example:
        >>> with temporary_directory() as tmp:
        ...     (tmp / 'archive.zip').write_bytes(data)
    """
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix))

    try:
        yield temp_dir
    finally:
        if cleanup and temp_dir.exists():
            safe_rmtree(temp_dir)


__all__ = [
    "is_relative_to",
    "find_executable",
    "make_executable",
    "unzip",
    "safe_rmtree",
    "temporary_directory",
]
