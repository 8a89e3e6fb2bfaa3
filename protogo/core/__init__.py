"""
Core functionality for protogo.

This package contains the foundational modules that the compiler pipeline
depends on: platform identification, the release API client, archive
extraction, cache directory handling and install locking.
"""

from .directory import (
    get_user_cache_dir,
    get_cache_root,
    ensure_cache_root,
    get_lock_dir,
)

from .locking import (
    LockManager,
    LockTimeout,
)

from .platform import (
    PlatformInfo,
    PlatformFragment,
    detect_platform,
    protoc_platform,
    flatc_platform,
    executable_name,
    clear_platform_cache,
)

from .release import GitHubReleaseClient

from .filesystem import (
    unzip,
    find_executable,
    temporary_directory,
)

from .exceptions import (
    ProtogoError,
    ConfigurationError,
    CacheDirectoryError,
    PlatformError,
    UnsupportedOSError,
    UnsupportedArchitectureError,
    ReleaseRequestError,
    ReleaseMetadataError,
    InstallError,
    ArchiveExtractionError,
    InsecureArchiveError,
    LocalExecutableNotFoundError,
    UnknownCompilerError,
    GoToolchainError,
    PluginInstallError,
    ProcessExecutionError,
)

__all__ = [
    "get_user_cache_dir",
    "get_cache_root",
    "ensure_cache_root",
    "get_lock_dir",
    "LockManager",
    "LockTimeout",
    "PlatformInfo",
    "PlatformFragment",
    "detect_platform",
    "protoc_platform",
    "flatc_platform",
    "executable_name",
    "clear_platform_cache",
    "GitHubReleaseClient",
    "unzip",
    "find_executable",
    "temporary_directory",
    "ProtogoError",
    "ConfigurationError",
    "CacheDirectoryError",
    "PlatformError",
    "UnsupportedOSError",
    "UnsupportedArchitectureError",
    "ReleaseRequestError",
    "ReleaseMetadataError",
    "InstallError",
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "LocalExecutableNotFoundError",
    "UnknownCompilerError",
    "GoToolchainError",
    "PluginInstallError",
    "ProcessExecutionError",
]
