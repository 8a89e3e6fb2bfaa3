"""
Host toolchain integration: the go command and child process execution.
"""

from .go import GoToolchain
from .runner import run_command, extend_path

__all__ = ["GoToolchain", "run_command", "extend_path"]
