"""Runtime settings for protogo.

Settings are assembled once at the CLI boundary and passed explicitly to the
core components, which never read the process environment themselves.

Precedence (lowest to highest):
    1. Built-in defaults
    2. YAML file (PROTOGO_CONFIG, or ./protogo.yaml when present)
    3. PROTOGO_* environment variables
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from protogo.core.exceptions import ConfigurationError
from protogo.core.platform import DISTRO_GCC, FLATC_DISTRO_ADDITIONS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "protogo.yaml"
DEFAULT_GO_EXECUTABLE = "go"
DEFAULT_VERSION = "latest"
DEFAULT_LOG_LEVEL = "WARN"
DEFAULT_HTTP_TIMEOUT = 30.0

ENV_CONFIG = "PROTOGO_CONFIG"
ENV_GO_EXECUTABLE = "PROTOGO_GO_EXECUTABLE"
ENV_PROTOC_VERSION = "PROTOGO_PROTOC_VERSION"
ENV_FLATC_VERSION = "PROTOGO_FLATC_VERSION"
ENV_FLATC_DISTRO = "PROTOGO_FLATC_DISTRO"
ENV_CACHE = "PROTOGO_CACHE"
ENV_GITHUB_TOKEN = "PROTOGO_GITHUB_BEARER_TOKEN"
ENV_LOG_LEVEL = "PROTOGO_LOG_LEVEL"
ENV_HTTP_TIMEOUT = "PROTOGO_HTTP_TIMEOUT"

# YAML key -> environment variable
_ENV_KEYS = {
    "go_executable": ENV_GO_EXECUTABLE,
    "protoc_version": ENV_PROTOC_VERSION,
    "flatc_version": ENV_FLATC_VERSION,
    "flatc_distro": ENV_FLATC_DISTRO,
    "cache_dir": ENV_CACHE,
    "github_token": ENV_GITHUB_TOKEN,
    "log_level": ENV_LOG_LEVEL,
    "http_timeout": ENV_HTTP_TIMEOUT,
}

# Level names accepted by PROTOGO_LOG_LEVEL (logrus-compatible)
LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


def parse_log_level(name: str) -> int:
    """
    Convert a level name to a logging level.

    Raises:
        ConfigurationError: If the name is not recognized
    """
    level = LOG_LEVELS.get(str(name).strip().lower())
    if level is None:
        raise ConfigurationError(
            f"Error parsing log level: {name} "
            f"(expected one of: {', '.join(LOG_LEVELS)})"
        )
    return level


@dataclass
class Settings:
    """Complete protogo runtime configuration."""

    go_executable: Optional[str] = None
    versions: Dict[str, str] = field(
        default_factory=lambda: {"protoc": DEFAULT_VERSION, "flatc": DEFAULT_VERSION}
    )
    flatc_distro: str = DISTRO_GCC
    cache_dir: Optional[str] = None
    github_token: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    def version_for(self, family_name: str) -> str:
        """Requested version for a compiler, 'latest' when not configured."""
        return self.versions.get(family_name) or DEFAULT_VERSION

    @property
    def logging_level(self) -> int:
        return parse_log_level(self.log_level)

    @classmethod
    def load(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        config_file: Optional[Path] = None,
    ) -> "Settings":
        """
        Build settings from defaults, an optional YAML file and environment.

        Args:
            environ: Environment mapping (os.environ if None)
            config_file: YAML file; when None, PROTOGO_CONFIG or
                ./protogo.yaml (if it exists) is used

        Returns:
            Validated Settings

        Raises:
            ConfigurationError: If the file or any value is invalid
        """
        if environ is None:
            environ = os.environ

        values: Dict[str, Any] = {}

        if config_file is None and environ.get(ENV_CONFIG):
            config_file = Path(environ[ENV_CONFIG])
            if not config_file.exists():
                raise ConfigurationError(f"Configuration file not found: {config_file}")
        elif config_file is None:
            default_file = Path.cwd() / DEFAULT_CONFIG_FILE
            if default_file.exists():
                config_file = default_file

        if config_file is not None:
            values.update(load_config_file(Path(config_file)))

        for key, env_name in _ENV_KEYS.items():
            if env_name in environ:
                values[key] = environ[env_name]

        return cls._from_values(values)

    @classmethod
    def _from_values(cls, values: Dict[str, Any]) -> "Settings":
        settings = cls()

        if values.get("go_executable"):
            settings.go_executable = str(values["go_executable"])
        for name in ("protoc", "flatc"):
            requested = values.get(f"{name}_version")
            if requested is None or requested == "":
                continue
            # YAML reads 30.10 as the float 30.1
            if isinstance(requested, bool) or not isinstance(requested, (str, int)):
                raise ConfigurationError(
                    f"Invalid {name}_version {requested!r}: "
                    f"quote the version in the configuration file (e.g. \"30.10\")"
                )
            settings.versions[name] = str(requested)
        if values.get("cache_dir"):
            settings.cache_dir = str(values["cache_dir"])
        if values.get("github_token"):
            settings.github_token = str(values["github_token"])

        if "flatc_distro" in values:
            distro = str(values["flatc_distro"])
            if distro not in FLATC_DISTRO_ADDITIONS:
                raise ConfigurationError(
                    f"Invalid flatc distro '{distro}', "
                    f"expected one of: {', '.join(FLATC_DISTRO_ADDITIONS)}"
                )
            settings.flatc_distro = distro

        if "log_level" in values:
            settings.log_level = str(values["log_level"])
            parse_log_level(settings.log_level)

        if "http_timeout" in values:
            try:
                settings.http_timeout = float(values["http_timeout"])
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Invalid HTTP timeout: {values['http_timeout']!r}"
                )
            if settings.http_timeout <= 0:
                raise ConfigurationError(
                    f"HTTP timeout must be positive, got {settings.http_timeout}"
                )

        return settings


def load_config_file(config_file: Path) -> Dict[str, Any]:
    """
    Load a protogo YAML configuration file.

    Args:
        config_file: Path to the YAML file

    Returns:
        Mapping of recognized keys to values

    Raises:
        ConfigurationError: If the file is unreadable, not a mapping, or
            contains unknown keys
    """
    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_file}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {config_file} must be a mapping")

    unknown = sorted(set(data) - set(_ENV_KEYS))
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys in {config_file}: {', '.join(unknown)}"
        )

    return data
