"""
Compiler download and installation.

This module downloads a compiler release archive for the current platform and
installs it into the cache:
1. Identify the platform fragment and build the archive URL
2. Take the install lock for the (compiler, version) pair
3. Download the archive into a temporary directory
4. Unpack it into a staging directory next to the final location
5. Atomically rename the staging directory into place

The temporary archive and the staging directory are removed on every exit
path, so a failed install never leaves a half-extracted version behind under
its final name.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from protogo.compilers.families import CompilerFamily
from protogo.core.directory import get_lock_dir
from protogo.core.exceptions import InstallError
from protogo.core.filesystem import (
    make_executable,
    safe_rmtree,
    temporary_directory,
    unzip,
)
from protogo.core.locking import LockManager, LockTimeout
from protogo.core.platform import DISTRO_GCC, PlatformInfo, detect_platform
from protogo.core.release import GitHubReleaseClient

logger = logging.getLogger(__name__)


class CompilerInstaller:
    """
    Downloads and installs compiler releases into the cache.

    Example:
        >>> installer = CompilerInstaller(GitHubReleaseClient())
        >>> installer.install(PROTOC, "31.0", cache_root / "protoc-31.0")
        PosixPath('.../protoc-31.0/bin/protoc')
    """

    def __init__(
        self,
        client: GitHubReleaseClient,
        platform: Optional[PlatformInfo] = None,
        distro: str = DISTRO_GCC,
        lock_manager: Optional[LockManager] = None,
    ):
        """
        Initialize installer.

        Args:
            client: Release client used for the binary download
            platform: Target platform (detected if None)
            distro: flatc Linux build flavour
            lock_manager: Lock manager (defaults to one in the cache root)
        """
        self.client = client
        self.platform = platform or detect_platform()
        self.distro = distro
        self.lock_manager = lock_manager

    def install(self, family: CompilerFamily, version: str, install_dir: Path) -> Path:
        """
        Download and install one compiler version.

        Args:
            family: Compiler to install
            version: Normalized version (without 'v' prefix)
            install_dir: Final cache directory for this version

        Returns:
            Path to the installed executable

        Raises:
            PlatformError: If no binary is published for this platform
            ReleaseRequestError: If the download request fails
            ArchiveExtractionError: If the archive cannot be unpacked
            InstallError: On any other installation failure
        """
        install_dir = Path(install_dir)
        fragment = family.platform_fragment(self.platform, self.distro)
        logger.debug(f"Current {family.name} platform: {fragment}")

        archive_name = family.archive_name(version, fragment)
        url = family.download_url(version, archive_name)
        executable = family.executable_path(install_dir, self.platform)

        try:
            lock_manager = self.lock_manager or LockManager(
                get_lock_dir(install_dir.parent)
            )
        except OSError as e:
            raise InstallError(f"Cannot create lock directory: {e}") from e

        try:
            with lock_manager.install_lock(f"{family.name}-{version}"):
                if executable.exists():
                    logger.info(
                        f"{family.name} {version} was installed by another process"
                    )
                    return executable
                self._download_and_unpack(family, url, archive_name, install_dir)
        except LockTimeout as e:
            raise InstallError(
                f"Timed out waiting for another {family.name} {version} install: {e}"
            ) from e

        logger.info(f"{family.name} {version} installed to {install_dir}")
        return executable

    def _download_and_unpack(
        self, family: CompilerFamily, url: str, archive_name: str, install_dir: Path
    ) -> None:
        """Download the archive and publish its contents at install_dir."""
        with temporary_directory(prefix=f"protogo_{family.name}_") as download_dir:
            archive_path = download_dir / archive_name

            logger.info(f"Downloading {family.name} release: {url}")
            self.client.download(url, archive_path)

            staging_dir = self._create_staging_dir(install_dir)
            try:
                logger.debug(f"Unzipping {archive_path} to {staging_dir}")
                unzip(archive_path, staging_dir)

                staged_executable = family.executable_path(staging_dir, self.platform)
                if not staged_executable.is_file():
                    raise InstallError(
                        f"Archive {archive_name} from {url} does not contain "
                        f"{staged_executable.relative_to(staging_dir)}"
                    )
                make_executable(staged_executable)

                self._publish(staging_dir, install_dir)
            finally:
                if staging_dir.exists():
                    safe_rmtree(staging_dir)

    def _create_staging_dir(self, install_dir: Path) -> Path:
        """Create a unique directory on the same filesystem as install_dir."""
        try:
            install_dir.parent.mkdir(parents=True, exist_ok=True)
            staging_dir = Path(
                tempfile.mkdtemp(prefix=f".{install_dir.name}-", dir=install_dir.parent)
            )
            staging_dir.chmod(0o755)
            return staging_dir
        except OSError as e:
            raise InstallError(
                f"Cannot create staging directory in {install_dir.parent}: {e}"
            ) from e

    def _publish(self, staging_dir: Path, install_dir: Path) -> None:
        """Move a fully extracted staging directory to its final name."""
        if install_dir.exists():
            # Leftover from an interrupted or older install without the executable
            logger.warning(f"Replacing incomplete installation: {install_dir}")
            safe_rmtree(install_dir, require_prefix=install_dir.parent)

        try:
            os.replace(staging_dir, install_dir)
        except OSError as e:
            raise InstallError(
                f"Cannot move {staging_dir} to {install_dir}: {e}"
            ) from e


__all__ = ["CompilerInstaller"]
