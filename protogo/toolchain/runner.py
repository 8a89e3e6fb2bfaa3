"""
Child process execution.

Commands run with the parent's stdin/stdout/stderr so compiler and go output
reach the user unchanged.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from protogo.core.exceptions import ProcessExecutionError

logger = logging.getLogger(__name__)


def extend_path(extra_dir: Union[str, Path], environ: Optional[dict] = None) -> dict:
    """
    Copy an environment with a directory appended to PATH.

    Example:
        >>> extend_path("/home/me/go/bin", {"PATH": "/usr/bin"})["PATH"]
        '/usr/bin:/home/me/go/bin'
    """
    env = dict(os.environ if environ is None else environ)
    current = env.get("PATH", "")
    env["PATH"] = f"{current}{os.pathsep}{extra_dir}" if current else str(extra_dir)
    return env


def run_command(
    executable: Union[str, Path],
    args: List[str],
    extra_path: Optional[Union[str, Path]] = None,
) -> int:
    """
    Run a command with inherited stdio and wait for it.

    Args:
        executable: Program to run
        args: Arguments passed to the program
        extra_path: Directory appended to PATH for the child, if any

    Returns:
        Exit status of the command

    Raises:
        ProcessExecutionError: If the program cannot be started
    """
    env = extend_path(extra_path) if extra_path is not None else None
    if env is not None:
        logger.debug(f"Command will be executed with following PATH: {env['PATH']}")

    command = [str(executable), *args]
    logger.debug(f"Running command: {command}")
    try:
        result = subprocess.run(command, env=env)
    except OSError as e:
        raise ProcessExecutionError(f"Could not start {executable}: {e}") from e

    if result.returncode != 0:
        logger.debug(f"Command {executable} exited with status {result.returncode}")
    return result.returncode


__all__ = ["run_command", "extend_path"]
