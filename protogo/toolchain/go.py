"""
protogo/toolchain/go.py

Go toolchain integration - locates the go executable and its binary
directory, and installs code-generator plugins with 'go install'.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping, Optional

from protogo.compilers.families import GoPackage
from protogo.core.exceptions import GoToolchainError, PluginInstallError
from protogo.core.filesystem import find_executable
from protogo.core.platform import PlatformInfo, detect_platform, executable_name

logger = logging.getLogger(__name__)

GO_EXECUTABLE = "go"
GO_ENV_TIMEOUT = 60
GO_INSTALL_TIMEOUT = 600


class GoToolchain:
    """
    A go executable and the environment it installs binaries into.

    Attributes:
        executable: go executable name or path, as passed to subprocess
        platform: Host platform used for GOOS/GOARCH during installs
    """

    def __init__(self, executable: str, platform: Optional[PlatformInfo] = None):
        self.executable = executable
        self.platform = platform or detect_platform()

    @classmethod
    def discover(
        cls, executable: Optional[str] = None, platform: Optional[PlatformInfo] = None
    ) -> "GoToolchain":
        """
        Find the go executable, either the configured one or 'go' on PATH.

        Args:
            executable: Configured executable (PROTOGO_GO_EXECUTABLE)
            platform: Host platform (detected if None)

        Returns:
            GoToolchain for the verified executable

        Raises:
            GoToolchainError: If the executable cannot be found
        """
        platform = platform or detect_platform()
        if not executable:
            executable = executable_name(GO_EXECUTABLE, platform)

        logger.debug(f"Looking up for GO executable: {executable}")
        if os.sep in executable or (os.altsep and os.altsep in executable):
            candidate = Path(executable)
            found = candidate if candidate.is_file() else None
        else:
            found = find_executable(executable)

        if found is None:
            raise GoToolchainError(f"go executable couldn't be found: {executable}")

        logger.debug("GO executable found!")
        return cls(executable, platform)

    def lookup_env(self, key: str) -> Optional[str]:
        """
        Read a go environment variable with 'go env KEY'.

        Returns:
            Value, or None if go fails or reports an empty value
        """
        try:
            result = subprocess.run(
                [self.executable, "env", key],
                capture_output=True,
                text=True,
                timeout=GO_ENV_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"'go env {key}' failed: {e}")
            return None

        value = result.stdout.strip()
        if result.returncode != 0 or not value:
            return None
        return value

    def binary_dir(self) -> Path:
        """
        Find the directory 'go install' places binaries in.

        Checks GOBIN, then GOPATH/bin, then ~/go/bin, the same order go
        itself uses.

        Raises:
            GoToolchainError: If the home directory cannot be resolved
        """
        gobin = self.lookup_env("GOBIN")
        if gobin:
            return Path(gobin)

        gopath = self.lookup_env("GOPATH")
        if gopath:
            # GOPATH may list several directories; binaries go to the first
            return Path(gopath.split(os.pathsep)[0]) / "bin"

        try:
            return Path.home() / "go" / "bin"
        except RuntimeError as e:
            raise GoToolchainError("user home directory couldn't be resolved") from e

    def ensure_package_installed(
        self, package: GoPackage, binary_dir: Optional[Path] = None
    ) -> Path:
        """
        Install a Go binary package unless it is already present.

        Args:
            package: Plugin to install
            binary_dir: go binary directory (looked up if None)

        Returns:
            Path to the installed plugin executable

        Raises:
            PluginInstallError: If installation fails or the binary is still
                missing afterwards
        """
        binary_dir = binary_dir or self.binary_dir()
        package_executable = binary_dir / executable_name(package.name, self.platform)

        if package_executable.is_file():
            return package_executable

        logger.debug(
            f"Package {package.name} is not installed, "
            f"installing latest version from: {package.install_target}"
        )
        env = dict(os.environ)
        env.update(self._target_env())
        try:
            result = subprocess.run(
                [self.executable, "install", package.install_target],
                capture_output=True,
                text=True,
                env=env,
                timeout=GO_INSTALL_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise PluginInstallError(
                f"Error installing package {package.name}: {e}"
            ) from e

        if result.returncode != 0:
            raise PluginInstallError(
                f"Error installing package {package.name}: exit status "
                f"{result.returncode}\n{result.stdout}{result.stderr}"
            )

        if not package_executable.is_file():
            raise PluginInstallError(
                f"After installation, still could not find package {package.name} "
                f"at {package_executable}"
            )

        return package_executable

    def _target_env(self) -> Mapping[str, str]:
        """GOOS/GOARCH pinned to the host so plugins run locally."""
        return {"GOOS": self.platform.os, "GOARCH": self.platform.arch}


__all__ = ["GoToolchain", "GO_EXECUTABLE"]
