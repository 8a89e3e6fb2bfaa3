"""
Platform detection for protogo.

This module identifies the running operating system and CPU architecture and
maps them to the artifact-name fragments that the upstream compiler projects
use in their release archives.

Two naming schemes are supported:
- protobuf (protoc): one fragment per OS and architecture pair
  (e.g., 'linux-x86_64', 'osx-universal_binary', 'win64')
- flatbuffers (flatc): one fragment per OS plus an optional toolchain ABI
  addition on Linux (e.g., 'Linux' + '.g++-13')

OS and architecture names follow the Go convention ('linux', 'darwin',
'windows'; 'amd64', '386', 'arm64', 'arm', 's390x', 'ppc64le') because those
are the names the wrapped go toolchain reports.

Usage:
    from protogo.core.platform import detect_platform, protoc_platform

    info = detect_platform()
    fragment = protoc_platform(info)
    print(f"protoc-31.0-{fragment.system}.zip")
"""

import functools
import platform
from dataclasses import dataclass

from protogo.core.exceptions import (
    ConfigurationError,
    UnsupportedArchitectureError,
    UnsupportedOSError,
)

# protoc release fragments
LINUX_AMD64 = "linux-x86_64"
LINUX_AMD32 = "linux-x86_32"
LINUX_390_64 = "linux-s390_64"
LINUX_PPCLE_64 = "linux-ppcle_64"
LINUX_ARM64 = "linux-aarch_64"
OSX_UNIVERSAL = "osx-universal_binary"
WIN32 = "win32"
WIN64 = "win64"

# flatc release fragments
LINUX_ANY = "Linux"
MAC = "Mac"
MAC_INTEL = "MacIntel"
WINDOWS = "Windows"
ADDITION_GCC = ".g++-13"
ADDITION_CLANG = ".clang++-18"

DISTRO_GCC = "g++"
DISTRO_CLANG = "clang"
FLATC_DISTRO_ADDITIONS = {
    DISTRO_GCC: ADDITION_GCC,
    DISTRO_CLANG: ADDITION_CLANG,
}

_PROTOC_PLATFORMS = {
    "linux": {
        "amd64": LINUX_AMD64,
        "386": LINUX_AMD32,
        "s390x": LINUX_390_64,
        "ppc64le": LINUX_PPCLE_64,
        "arm64": LINUX_ARM64,
    },
    # One universal artifact covers both Mac architectures
    "darwin": {
        "amd64": OSX_UNIVERSAL,
        "arm64": OSX_UNIVERSAL,
    },
    "windows": {
        "386": WIN32,
        "arm": WIN32,
        "amd64": WIN64,
        "arm64": WIN64,
    },
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Operating system and CPU architecture of a host.

    Attributes:
        os: Operating system ('linux', 'darwin', 'windows', ...)
        arch: CPU architecture ('amd64', '386', 'arm64', 'arm', ...)
    """

    os: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


@dataclass(frozen=True)
class PlatformFragment:
    """
    Platform part of a release archive name.

    Attributes:
        system: Main platform fragment (e.g., 'linux-x86_64', 'Linux')
        addition: Toolchain ABI suffix, empty when not applicable
    """

    system: str
    addition: str = ""

    def __str__(self) -> str:
        return f"{self.system}{self.addition}"


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect the current platform.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo with Go-style OS and architecture names

    Example:
        >>> detect_platform()
        PlatformInfo(os='linux', arch='amd64')
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """Return the Go-style name of the running OS."""
    return platform.system().lower()


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'amd64', '386', 'arm64', 'arm', or the raw
        machine name for anything else (e.g., 's390x', 'ppc64le')
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "amd64"
    elif machine in ("i386", "i686", "x86"):
        return "386"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine.startswith("arm"):
        return "arm"
    else:
        return machine


def protoc_platform(info: PlatformInfo) -> PlatformFragment:
    """
    Determine the fragment identifying a protoc release binary.

    See https://github.com/protocolbuffers/protobuf/releases for the list of
    published archives.

    Args:
        info: Platform to identify

    Returns:
        PlatformFragment without addition

    Raises:
        UnsupportedOSError: If the OS has no protoc binaries
        UnsupportedArchitectureError: If the architecture has no binaries
            for a supported OS

    Example:
        >>> protoc_platform(PlatformInfo("linux", "arm64")).system
        'linux-aarch_64'
    """
    architectures = _PROTOC_PLATFORMS.get(info.os)
    if architectures is None:
        raise UnsupportedOSError(info.os, family="protoc")

    system = architectures.get(info.arch)
    if system is None:
        raise UnsupportedArchitectureError(info.os, info.arch, family="protoc")

    return PlatformFragment(system)


def flatc_platform(info: PlatformInfo, distro: str = DISTRO_GCC) -> PlatformFragment:
    """
    Determine the fragment identifying a flatc release binary.

    Linux builds are published per C++ toolchain, selected by distro.

    Args:
        info: Platform to identify
        distro: Linux build flavour, 'g++' (default) or 'clang'

    Returns:
        PlatformFragment, with an addition on Linux only

    Raises:
        UnsupportedOSError: If the OS has no flatc binaries
        UnsupportedArchitectureError: If the Mac architecture is unknown
        ConfigurationError: If distro is not a recognized flavour
    """
    if info.os == "linux":
        addition = FLATC_DISTRO_ADDITIONS.get(distro)
        if addition is None:
            raise ConfigurationError(
                f"Unknown flatc distro '{distro}', "
                f"expected one of: {', '.join(FLATC_DISTRO_ADDITIONS)}"
            )
        return PlatformFragment(LINUX_ANY, addition)
    elif info.os == "darwin":
        if info.arch == "amd64":
            return PlatformFragment(MAC_INTEL)
        elif info.arch == "arm64":
            return PlatformFragment(MAC)
        raise UnsupportedArchitectureError(info.os, info.arch, family="flatc")
    elif info.os == "windows":
        return PlatformFragment(WINDOWS)

    raise UnsupportedOSError(info.os, family="flatc")


def executable_name(name: str, info: PlatformInfo) -> str:
    """
    Get the file name of an executable on the given platform.

    Example:
        >>> executable_name("protoc", PlatformInfo("windows", "amd64"))
        'protoc.exe'
    """
    if info.is_windows:
        return f"{name}.exe"
    return name


def clear_platform_cache():
    """
    Clear the platform detection cache.

    Useful for testing or when platform information changes.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "PlatformFragment",
    "detect_platform",
    "protoc_platform",
    "flatc_platform",
    "executable_name",
    "clear_platform_cache",
    "DISTRO_GCC",
    "DISTRO_CLANG",
    "FLATC_DISTRO_ADDITIONS",
]
