"""
Centralized exception hierarchy for protogo.

Every error raised by the core derives from ProtogoError, so the CLI can
turn any of them into a single fatal failure for the invocation.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ProtogoError(Exception):
    """Base exception for all protogo errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(ProtogoError):
    """Invalid configuration value or unreadable configuration file."""

    pass


class CacheDirectoryError(ConfigurationError):
    """Raised when the cache directory cannot be resolved or created."""

    pass


# ============================================================================
# Platform Exceptions
# ============================================================================


class PlatformError(ProtogoError):
    """Base exception for platform identification errors."""

    pass


class UnsupportedOSError(PlatformError):
    """Raised when no compiler binaries are published for the OS."""

    def __init__(self, os_name: str, family: str = ""):
        self.os = os_name
        self.family = family
        target = f"{family} binaries" if family else "compiler binaries"
        super().__init__(
            f"The OS '{os_name}' is either not supported by protogo "
            f"or there are no {target} distributed for it"
        )


class UnsupportedArchitectureError(PlatformError):
    """Raised when the OS is known but the architecture is not."""

    def __init__(self, os_name: str, arch: str, family: str = ""):
        self.os = os_name
        self.arch = arch
        self.family = family
        target = f"{family} binaries" if family else "compiler binaries"
        super().__init__(
            f"The architecture '{arch}' on '{os_name}' is either not supported "
            f"by protogo or there are no {target} distributed for it"
        )


# ============================================================================
# Release API Exceptions
# ============================================================================


class ReleaseRequestError(ProtogoError):
    """Raised when an HTTP request to the release API fails."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Request to {url} failed: {reason}")


class ReleaseMetadataError(ProtogoError):
    """Raised when release metadata cannot be decoded or is malformed."""

    pass


# ============================================================================
# Installation Exceptions
# ============================================================================


class InstallError(ProtogoError):
    """Raised when a compiler archive cannot be downloaded or installed."""

    pass


class ArchiveExtractionError(InstallError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class LocalExecutableNotFoundError(ProtogoError):
    """Raised when 'local' is requested but the compiler is not on PATH."""

    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(
            f"{executable} executable couldn't be found on PATH "
            f"(version 'local' requested)"
        )


class UnknownCompilerError(ProtogoError):
    """Raised when an unsupported compiler name is requested."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown compiler requested: {name}")


# ============================================================================
# Go Toolchain Exceptions
# ============================================================================


class GoToolchainError(ProtogoError):
    """Base exception for go executable errors."""

    pass


class PluginInstallError(GoToolchainError):
    """Raised when a code-generator plugin cannot be installed."""

    pass


class ProcessExecutionError(ProtogoError):
    """Raised when a child process cannot be started."""

    pass
