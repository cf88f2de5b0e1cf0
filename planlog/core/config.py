"""Configuration management for planlog.

Standardizes on ``planlog_config.toml``.

Search order (first match wins, merged over the built-in defaults):
1. Current directory
2. ~/.config/planlog/
3. /etc/planlog/
"""

import copy
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from .error_handling import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "planlog_config.toml"

PREFIX_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_-]*$")
STATUS_PATTERN = re.compile(r"^[a-z]+$")

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "plans": {
        "directory": "plans",
        "prefix": "todo",
        "number_width": 3,
        "log_file": "LOG.md",
        "statuses": ["done", "abandoned", "superseded"],
        "require_approval": True,
        "instructions_file": "INSTRUCTIONS.md",
    },
    "deploy": {
        "remote": "origin",
        "branch": "main",
        "site_url": "",
        "expected_text": "",
        "workflow": "",
        "timeout": 600,
        "interval": 15,
        "request_timeout": 10,
        "require_change": False,
        "allow_dirty": False,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


class ConfigError(ConfigurationError):
    """Raised when there's an error with configuration."""

    pass


def search_locations() -> List[Path]:
    """Directories searched for the configuration file, in priority order."""
    return [
        Path.cwd(),
        Path.home() / ".config" / "planlog",
        Path("/etc/planlog"),
    ]


def find_config_file(filename: str = CONFIG_FILENAME) -> Optional[Path]:
    """Find configuration file using standardized search order.

    Args:
        filename: Filename to search for

    Returns:
        Path to config file or None if not found
    """
    for location in search_locations():
        config_path = location / filename
        if config_path.exists() and config_path.is_file():
            return config_path

    return None


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge override configuration into base configuration."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            merge_config(base[key], value)
        else:
            base[key] = value


class Config:
    """Configuration manager for planlog."""

    def __init__(
        self,
        config_path: str | Path | None = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Load configuration.

        Args:
            config_path: Explicit config file. Must exist when given.
                When omitted the standard search locations are used.
            data: Configuration overrides applied on top of the defaults
                instead of reading any file.
        """
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        self.source: Optional[Path] = None

        if data is not None:
            merge_config(self._config, data)
            return

        if config_path is not None:
            path = Path(config_path)
            if not path.is_file():
                raise ConfigError(f"Configuration file not found: {path}")
        else:
            path = find_config_file()
            if path is None:
                logger.debug(f"No {CONFIG_FILENAME} found, using defaults")
                return

        self._load_file(path)

    def _load_file(self, path: Path) -> None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded_config = toml.load(f)
        except (OSError, toml.TomlDecodeError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e

        merge_config(self._config, loaded_config)
        self.source = path
        logger.info(f"Configuration loaded from {path}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        try:
            return self._config[section][key]
        except KeyError:
            if default is not None:
                return default
            raise ConfigError(f"Configuration key '{section}.{key}' not found")

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get an entire configuration section."""
        try:
            return self._config[section]
        except KeyError:
            raise ConfigError(f"Configuration section '{section}' not found")

    @property
    def plans(self) -> Dict[str, Any]:
        """Get plan directory configuration."""
        return self.get_section("plans")

    @property
    def deploy(self) -> Dict[str, Any]:
        """Get deployment configuration."""
        return self.get_section("deploy")

    @property
    def logging(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.get_section("logging")

    @property
    def config(self) -> Dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def plans_directory(self, root: Optional[Path] = None) -> Path:
        """Plan directory, resolved against ``root`` when it is relative."""
        directory = Path(self.plans["directory"])
        if root is not None and not directory.is_absolute():
            return root / directory
        return directory

    def validate(self) -> None:
        """Validate configuration completeness and correctness."""
        for section in DEFAULT_CONFIG:
            if section not in self._config:
                raise ConfigError(f"Missing required configuration section: {section}")

        plans = self.plans
        if not PREFIX_PATTERN.match(str(plans["prefix"])):
            raise ConfigError(
                f"plans.prefix must contain only letters, digits, '_' and '-': "
                f"{plans['prefix']!r}"
            )
        if not isinstance(plans["number_width"], int) or plans["number_width"] < 1:
            raise ConfigError("plans.number_width must be a positive integer")

        statuses = plans["statuses"]
        if not isinstance(statuses, list) or not statuses:
            raise ConfigError("plans.statuses must be a non-empty list")
        for status in statuses:
            if not isinstance(status, str) or not STATUS_PATTERN.match(status):
                raise ConfigError(
                    f"plans.statuses entries must be lowercase words: {status!r}"
                )
            if status == "open":
                raise ConfigError("'open' cannot be used as a closed status")

        self._validate_ranges()

    def _validate_ranges(self) -> None:
        """Validate deployment value ranges."""
        deploy = self.deploy
        for key in ("timeout", "interval", "request_timeout"):
            if deploy[key] <= 0:
                raise ConfigError(f"deploy.{key} must be positive")

        if deploy["interval"] > deploy["timeout"]:
            raise ConfigError("deploy.interval must not exceed deploy.timeout")

        site_url = deploy["site_url"]
        if site_url and not site_url.startswith(("http://", "https://")):
            raise ConfigError(f"deploy.site_url must be an http(s) URL: {site_url}")

    def to_toml(self) -> str:
        """Serialize the effective configuration."""
        data = copy.deepcopy(self._config)
        # TOML has no null value
        for section in data.values():
            for key in [k for k, v in section.items() if v is None]:
                del section[key]
        return toml.dumps(data)
