"""
protogo command-line interface.

protogo is run with the same arguments as the 'go' executable, followed by a
'--' separator, then the compiler name ('protoc' or 'flatc') and its
arguments:

    protogo generate ./... -- protoc --go_out=. api.proto
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from protogo.compilers.families import FAMILIES, get_family
from protogo.compilers.manager import CompilerManager
from protogo.config.settings import Settings
from protogo.core.exceptions import ProtogoError
from protogo.toolchain.go import GoToolchain
from protogo.toolchain.runner import run_command

logger = logging.getLogger(__name__)

ARGS_DELIMITER = "--"
NO_COMPILER = ""

HELP_TEXT = """\
    'protogo' is an automatization tool for Go + protobuf / flatbuffers + gRPC builds!
You can run it with the same arguments as 'go' executable, followed by '--' flag and then compiler name ('protoc' or 'flatc') and its arguments.
Protogo will handle everything else, including compiler binaries installation, installing required packages, etc.
Use official gRPC installation guide as reference for protobuf: https://grpc.io/docs/languages/go/quickstart/#prerequisites.
Use official gRPC installation guide as reference for flatbuffers: https://flatbuffers.dev/languages/go/.
You can additionally control it with the following environment variables:
  - PROTOGO_GO_EXECUTABLE: define 'go' executable to use, default: go
  - PROTOGO_PROTOC_VERSION: define 'protoc' version to use, should match protobuf release tags, default: latest
      NB! If 'local' is specified as 'protoc' version, local installation will be used
  - PROTOGO_FLATC_VERSION: define 'flatc' version to use, should match flatbuffers release tags, default: latest
      NB! If 'local' is specified as 'flatc' version, local installation will be used
  - PROTOGO_FLATC_DISTRO: select distribution of 'flatc' for linux (can be either 'g++' or 'clang', default 'g++')
  - PROTOGO_CACHE: define cache directory, where compiler executables will be stored, default: <user cache>/protogo
  - PROTOGO_GITHUB_BEARER_TOKEN: GitHub authentication token for API requests (release assets retrieval)
  - PROTOGO_HTTP_TIMEOUT: timeout in seconds for GitHub requests, default: 30
  - PROTOGO_LOG_LEVEL: define logging level (trace, debug, info, warn, error, fatal, panic), default: warn
  - PROTOGO_CONFIG: YAML file with the same settings (keys: go_executable, protoc_version, ...), default: ./protogo.yaml"""


@dataclass
class InvocationArgs:
    """Arguments of one protogo invocation, split around '--'."""

    go_args: List[str] = field(default_factory=list)
    compiler: str = NO_COMPILER
    compiler_args: List[str] = field(default_factory=list)


def split_arguments(argv: List[str]) -> Optional[InvocationArgs]:
    """
    Split command-line arguments around the first '--'.

    Args:
        argv: Arguments without the program name

    Returns:
        InvocationArgs, or None if there is no '--' separator

    Example:
        >>> split_arguments(["build", "--", "protoc", "--version"])
        InvocationArgs(go_args=['build'], compiler='protoc', compiler_args=['--version'])
    """
    if ARGS_DELIMITER not in argv:
        return None

    delimiter = argv.index(ARGS_DELIMITER)
    rest = argv[delimiter + 1 :]

    return InvocationArgs(
        go_args=list(argv[:delimiter]),
        compiler=rest[0] if rest else NO_COMPILER,
        compiler_args=list(rest[1:]),
    )


class CLI:
    """protogo command-line interface."""

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize CLI.

        Args:
            settings: Runtime settings (loaded from the environment if None)
        """
        self.settings = settings

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        if args is None:
            args = sys.argv[1:]

        try:
            settings = self.settings or Settings.load()
            self._configure_logging(settings)
        except ProtogoError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        invocation = split_arguments(args)
        logger.debug(f"Running protogo with arguments: {args}")
        if invocation is None:
            print(HELP_TEXT)
            return 0

        logger.debug("Checking compiler name...")
        if invocation.compiler != NO_COMPILER and invocation.compiler not in FAMILIES:
            logger.error(f"Unknown compiler requested: {invocation.compiler}")
            return 1

        try:
            return self._execute(settings, invocation)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except ProtogoError as e:
            logger.error(f"Error: {e}")
            logger.debug("Failure details", exc_info=True)
            return 1

    def _configure_logging(self, settings: Settings):
        """
        Configure logging based on the configured log level.

        Args:
            settings: Runtime settings with log_level
        """
        level = settings.logging_level
        if level <= logging.DEBUG:
            format_str = "%(levelname)s [%(name)s] %(message)s"
        else:
            format_str = "%(levelname)s: %(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,
        )

    def _execute(self, settings: Settings, invocation: InvocationArgs) -> int:
        """Prepare the compiler, then run the compiler and go commands."""
        logger.debug("Checking GO executable...")
        go = GoToolchain.discover(settings.go_executable)
        logger.debug(f"GO executable found: {go.executable}")

        logger.debug("Checking GO binary location...")
        go_bin = go.binary_dir()
        logger.debug(f"GO binary location found: {go_bin}")

        compiler_executable = None
        if invocation.compiler != NO_COMPILER:
            family = get_family(invocation.compiler)
            manager = CompilerManager(settings, platform=go.platform)
            compiler_executable = manager.prepare(family)
            manager.ensure_plugins(family, go, go_bin)
        else:
            logger.debug("No compiler supplied, so installation skipped!")

        if compiler_executable is not None and invocation.compiler_args:
            logger.debug(
                f"Running compiler command: {compiler_executable} {invocation.compiler_args}"
            )
            status = run_command(
                compiler_executable, invocation.compiler_args, extra_path=go_bin
            )
            if status != 0:
                logger.error(f"Compiler execution failed with exit status {status}")
                return status
        else:
            logger.debug("No compiler arguments were supplied, skipping compiler execution!")

        if invocation.go_args:
            logger.debug(f"Running GO command: {go.executable} {invocation.go_args}")
            status = run_command(go.executable, invocation.go_args)
            if status != 0:
                logger.error(f"GO execution failed with exit status {status}")
                return status
        else:
            logger.debug("No GO arguments were supplied, skipping GO execution!")

        return 0


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
