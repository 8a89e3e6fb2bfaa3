"""
Compiler family descriptors.

protoc and flatc share one resolve/download/install pipeline. Everything
that differs between them (release endpoints, archive naming, platform
naming scheme, layout of the unpacked archive, code-generator plugins) is
captured by a CompilerFamily value.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from protogo.config.settings import (
    ENV_FLATC_DISTRO,
    ENV_FLATC_VERSION,
    ENV_PROTOC_VERSION,
)
from protogo.core.exceptions import UnknownCompilerError
from protogo.core.platform import (
    DISTRO_GCC,
    PlatformFragment,
    PlatformInfo,
    executable_name,
    flatc_platform,
    protoc_platform,
)


@dataclass(frozen=True)
class GoPackage:
    """A Go code-generator plugin installed with 'go install'."""

    prefix: str
    name: str

    @property
    def install_target(self) -> str:
        return f"{self.prefix}/{self.name}@latest"


@dataclass(frozen=True)
class CompilerFamily:
    """
    Everything the pipeline needs to know about one external compiler.

    Attributes:
        name: Logical name, also the executable and cache directory prefix
        version_env: Environment variable holding the requested version
        release_url: Release listing endpoint for 'latest' resolution
        download_url_template: Asset URL, formatted with version and archive
        archive_template: Archive file name, formatted with version,
            platform and addition
        platform_resolver: Maps a platform and distro to a PlatformFragment
        executable_dir: Path segments from the install dir to the executable
        distro_env: Environment variable selecting a build flavour, if any
        plugins: Go plugins the compiler needs at run time
    """

    name: str
    version_env: str
    release_url: str
    download_url_template: str
    archive_template: str
    platform_resolver: Callable[[PlatformInfo, str], PlatformFragment]
    executable_dir: Tuple[str, ...] = ()
    distro_env: Optional[str] = None
    plugins: Tuple[GoPackage, ...] = field(default_factory=tuple)

    def platform_fragment(
        self, info: PlatformInfo, distro: str = DISTRO_GCC
    ) -> PlatformFragment:
        """Identify the release artifact for a platform."""
        return self.platform_resolver(info, distro)

    def archive_name(self, version: str, fragment: PlatformFragment) -> str:
        """
        Get the release archive file name.

        Example:
            >>> PROTOC.archive_name("31.0", PlatformFragment("linux-x86_64"))
            'protoc-31.0-linux-x86_64.zip'
        """
        return self.archive_template.format(
            version=version, platform=fragment.system, addition=fragment.addition
        )

    def download_url(self, version: str, archive: str) -> str:
        """Get the download URL of a release archive."""
        return self.download_url_template.format(version=version, archive=archive)

    def executable_path(self, install_dir: Path, info: PlatformInfo) -> Path:
        """Get the executable location inside an install directory."""
        return Path(install_dir).joinpath(
            *self.executable_dir, executable_name(self.name, info)
        )


def _protoc_resolver(info: PlatformInfo, distro: str) -> PlatformFragment:
    return protoc_platform(info)


PROTOC = CompilerFamily(
    name="protoc",
    version_env=ENV_PROTOC_VERSION,
    release_url="https://api.github.com/repos/protocolbuffers/protobuf/releases/latest",
    download_url_template=(
        "https://github.com/protocolbuffers/protobuf/releases/download/v{version}/{archive}"
    ),
    archive_template="protoc-{version}-{platform}.zip",
    platform_resolver=_protoc_resolver,
    executable_dir=("bin",),
    plugins=(
        GoPackage("google.golang.org/protobuf/cmd", "protoc-gen-go"),
        GoPackage("google.golang.org/grpc/cmd", "protoc-gen-go-grpc"),
    ),
)

FLATC = CompilerFamily(
    name="flatc",
    version_env=ENV_FLATC_VERSION,
    release_url="https://api.github.com/repos/google/flatbuffers/releases/latest",
    download_url_template=(
        "https://github.com/google/flatbuffers/releases/download/v{version}/{archive}"
    ),
    archive_template="{platform}.flatc.binary{addition}.zip",
    platform_resolver=flatc_platform,
    distro_env=ENV_FLATC_DISTRO,
)

FAMILIES: Dict[str, CompilerFamily] = {
    PROTOC.name: PROTOC,
    FLATC.name: FLATC,
}


def get_family(name: str) -> CompilerFamily:
    """
    Look up a compiler family by name.

    Raises:
        UnknownCompilerError: If the name is not a supported compiler
    """
    try:
        return FAMILIES[name]
    except KeyError:
        raise UnknownCompilerError(name) from None


__all__ = ["CompilerFamily", "GoPackage", "PROTOC", "FLATC", "FAMILIES", "get_family"]
