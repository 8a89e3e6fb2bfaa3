"""
Compiler cache resolution.

Decides which version of a compiler to use and whether it has to be
downloaded, without performing any download itself. The only network access
is the release listing lookup for the 'latest' request.

Cache layout:
    <cache_root>/protoc-<version>/bin/protoc
    <cache_root>/flatc-<version>/flatc

A cached version is considered installed as soon as its executable exists;
the contents are not verified.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from protogo.compilers.families import CompilerFamily
from protogo.core.exceptions import (
    LocalExecutableNotFoundError,
    ReleaseMetadataError,
    ReleaseRequestError,
)
from protogo.core.filesystem import find_executable
from protogo.core.platform import PlatformInfo, detect_platform
from protogo.core.release import GitHubReleaseClient

logger = logging.getLogger(__name__)

LATEST = "latest"
LOCAL = "local"


def normalize_version(tag: str) -> str:
    """
    Strip the leading 'v' prefix from a version tag.

    Repeated prefixes are stripped too, so normalizing twice is a no-op.

    Example:
        >>> normalize_version("v31.0")
        '31.0'
        >>> normalize_version("31.0")
        '31.0'
    """
    return tag.lstrip("v")


@dataclass(frozen=True)
class CacheEntry:
    """
    Outcome of resolving a compiler request.

    Attributes:
        version_tag: Normalized version, or 'local'
        install_dir: Cache directory for the version (None for 'local')
        executable_path: Expected (or found, for 'local') executable
        needs_download: True if the executable is not in the cache yet
    """

    version_tag: str
    install_dir: Optional[Path]
    executable_path: Path
    needs_download: bool

    @property
    def is_local(self) -> bool:
        return self.install_dir is None


def resolve(
    family: CompilerFamily,
    version_request: Optional[str],
    cache_root: Path,
    client: GitHubReleaseClient,
    platform: Optional[PlatformInfo] = None,
    which: Callable[[str], Optional[Path]] = find_executable,
) -> CacheEntry:
    """
    Resolve a compiler version request against the cache.

    Args:
        family: Compiler to resolve
        version_request: 'latest' (or None/empty), 'local', or a tag with or
            without 'v' prefix
        cache_root: Directory holding all installed versions
        client: Release client used for 'latest'
        platform: Target platform (detected if None)
        which: Executable lookup used for 'local'

    Returns:
        CacheEntry describing what to run and whether to download it

    Raises:
        ReleaseMetadataError: If the latest version cannot be determined
        LocalExecutableNotFoundError: If 'local' is requested but the
            compiler is not on PATH
    """
    platform = platform or detect_platform()
    version_tag = version_request or LATEST

    logger.debug(f"Requested {family.name} version tag is: {version_tag}")
    if version_tag == LATEST:
        try:
            version_tag = client.fetch_latest_tag(family.release_url)
        except (ReleaseRequestError, ReleaseMetadataError) as e:
            raise ReleaseMetadataError(
                f"Latest {family.name} version tag couldn't be resolved: {e}"
            ) from e
    elif version_tag == LOCAL:
        local_executable = which(family.name)
        if local_executable is None:
            raise LocalExecutableNotFoundError(family.name)
        logger.debug(f"Using local {family.name} installation: {local_executable}")
        return CacheEntry(
            version_tag=LOCAL,
            install_dir=None,
            executable_path=Path(local_executable),
            needs_download=False,
        )

    version_tag = normalize_version(version_tag)
    install_dir = Path(cache_root) / f"{family.name}-{version_tag}"
    executable = family.executable_path(install_dir, platform)
    needs_download = not executable.exists()

    logger.debug(
        f"{family.name} version: {version_tag}, cache location: {install_dir}, "
        f"will be downloaded: {needs_download}"
    )
    return CacheEntry(
        version_tag=version_tag,
        install_dir=install_dir,
        executable_path=executable,
        needs_download=needs_download,
    )


__all__ = ["CacheEntry", "resolve", "normalize_version", "LATEST", "LOCAL"]
