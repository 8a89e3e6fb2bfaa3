"""
protogo CLI module.

This module provides the command-line interface for protogo.
"""

from .parser import CLI, main, split_arguments

__all__ = ["CLI", "main", "split_arguments"]
