"""Configuration for protogo."""

from .settings import Settings, load_config_file, parse_log_level

__all__ = ["Settings", "load_config_file", "parse_log_level"]
