"""
Compiler preparation pipeline.

Ties the resolver, the installer and the go toolchain together: given a
compiler family it returns an executable that is ready to run, with every
plugin the compiler needs installed.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from protogo.compilers.families import CompilerFamily
from protogo.compilers.installer import CompilerInstaller
from protogo.compilers.resolver import CacheEntry, resolve
from protogo.config.settings import Settings
from protogo.core.directory import ensure_cache_root
from protogo.core.platform import PlatformInfo, detect_platform
from protogo.core.release import GitHubReleaseClient

if TYPE_CHECKING:
    from protogo.toolchain.go import GoToolchain

logger = logging.getLogger(__name__)


class CompilerManager:
    """
    Prepares compilers according to the runtime settings.

    Attributes:
        settings: Runtime settings
        client: Release API client
        platform: Host platform
        cache_root: Directory holding installed compiler versions
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[GitHubReleaseClient] = None,
        platform: Optional[PlatformInfo] = None,
        cache_root: Optional[Path] = None,
        installer: Optional[CompilerInstaller] = None,
    ):
        self.settings = settings
        self.client = client or GitHubReleaseClient(
            token=settings.github_token, timeout=settings.http_timeout
        )
        self.platform = platform or detect_platform()
        self.cache_root = (
            Path(cache_root) if cache_root else ensure_cache_root(settings.cache_dir)
        )
        self.installer = installer or CompilerInstaller(
            self.client, platform=self.platform, distro=settings.flatc_distro
        )

    def resolve(self, family: CompilerFamily) -> CacheEntry:
        """Resolve the configured version of a compiler against the cache."""
        return resolve(
            family,
            self.settings.version_for(family.name),
            self.cache_root,
            self.client,
            platform=self.platform,
        )

    def prepare(self, family: CompilerFamily) -> Path:
        """
        Get a runnable executable for a compiler, downloading it if needed.

        Returns:
            Path to the compiler executable

        Raises:
            ProtogoError: If resolution or installation fails
        """
        logger.debug(f"Extracting required {family.name} version...")
        entry = self.resolve(family)

        if entry.is_local:
            logger.debug(f"{family.name} executable found at: {entry.executable_path}")
            return entry.executable_path

        if not entry.needs_download:
            logger.debug(f"{family.name} executable found at: {entry.executable_path}")
            return entry.executable_path

        logger.debug(f"Downloading {family.name} executable...")
        executable = self.installer.install(
            family, entry.version_tag, entry.install_dir
        )
        logger.debug(f"{family.name} executable downloaded to: {executable}")
        return executable

    def ensure_plugins(
        self,
        family: CompilerFamily,
        go: "GoToolchain",
        binary_dir: Optional[Path] = None,
    ) -> None:
        """
        Install the Go plugins a compiler needs.

        Raises:
            PluginInstallError: If a plugin cannot be installed
        """
        for package in family.plugins:
            go.ensure_package_installed(package, binary_dir)
            logger.debug(f"Package {package.name} found or installed successfully!")


__all__ = ["CompilerManager"]
