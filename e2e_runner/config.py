"""
Configuration handling for the MCP E2E runner.

This module loads configuration from defaults, an optional JSON file, a
``.env`` file and environment variables, validates it, and exposes the
timing knobs the negotiator and scenario runner need as ``RunnerSettings``.
"""

import copy
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .errors import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_TARGET = "http://127.0.0.1:8080/mcp"


@dataclass(frozen=True)
class RunnerSettings:
    """Timing and client identity used while testing a target."""

    # Negotiation
    streamable_attempts: int = 3
    streamable_retry_delay: float = 0.25
    sse_retry_delay: float = 0.2

    # Scenario
    close_delay: float = 0.05

    # Transport and session read timeout, in seconds
    timeout: float = 30.0

    # Identity sent with the initialize request
    client_name: str = "e2e-client"
    client_version: str = "1.0.0"


class Config:
    """Configuration manager for the E2E runner."""

    DEFAULT_CONFIG = {
        "targets": DEFAULT_TARGET,
        "connection": {
            "streamableAttempts": 3,
            "streamableRetryDelay": 0.25,
            "sseRetryDelay": 0.2,
            "closeDelay": 0.05,
            "timeout": 30.0,
        },
        "client": {
            "name": "e2e-client",
            "version": "1.0.0",
        },
        "logging": {
            "level": "WARNING",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None,
        },
    }

    ENV_MAPPINGS = {
        "E2E_TARGETS": ("targets", "string"),
        "E2E_STREAMABLE_ATTEMPTS": ("connection.streamableAttempts", "int"),
        "E2E_STREAMABLE_RETRY_DELAY": ("connection.streamableRetryDelay", "float"),
        "E2E_SSE_RETRY_DELAY": ("connection.sseRetryDelay", "float"),
        "E2E_CLOSE_DELAY": ("connection.closeDelay", "float"),
        "E2E_TIMEOUT": ("connection.timeout", "float"),
        "E2E_LOG_LEVEL": ("logging.level", "string"),
        "E2E_LOG_FILE": ("logging.file", "string"),
    }

    def __init__(self, config_path: Optional[str] = None, env_file: Optional[str] = ".env"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to a JSON configuration file (optional)
            env_file: Path to a dotenv file loaded before reading the
                environment; ``None`` disables it
        """
        self.config: Dict[str, Any] = {}
        self.config_path = config_path
        self.env_file = env_file
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path:
            self._load_from_file(self.config_path)

        if self.env_file and Path(self.env_file).is_file():
            # Variables already set in the process environment take precedence
            load_dotenv(self.env_file, override=False)
            logger.debug(f"Loaded dotenv file {self.env_file}")

        self._load_from_env()
        self._validate_config()

        logger.debug(f"Configuration loaded from {self.config_path or 'defaults'}")

    def _load_from_file(self, config_path: str) -> None:
        """
        Load configuration from JSON file.

        Args:
            config_path: Path to configuration file

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Config file not found: {config_path}, using defaults")
            return

        try:
            with open(path, "r") as f:
                file_config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to load config file: {e}")

        if not isinstance(file_config, dict):
            raise ConfigError("Config file must contain a JSON object")

        self._merge_config(self.config, file_config)
        logger.info(f"Loaded configuration from {config_path}")

    def _load_from_env(self) -> None:
        """Load configuration overrides from environment variables."""
        for env_var, (config_path, value_type) in self.ENV_MAPPINGS.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            try:
                parsed_value = self._parse_env_value(value, value_type)
            except ValueError as e:
                raise ConfigError(f"Failed to parse {env_var}={value!r}: {e}", config_key=config_path)
            self._set_nested_value(self.config, config_path, parsed_value)
            logger.debug(f"Loaded {env_var}={value}")

    def _parse_env_value(self, value: str, value_type: str) -> Any:
        """
        Parse environment variable value based on type.

        Args:
            value: String value from environment
            value_type: Type to parse to (string, int, float)

        Returns:
            Parsed value

        Raises:
            ValueError: If value cannot be parsed
        """
        if value_type == "string":
            return value
        elif value_type == "int":
            return int(value)
        elif value_type == "float":
            return float(value)
        else:
            raise ValueError(f"Unknown value type: {value_type}")

    def _merge_config(self, base: Dict, override: Dict) -> None:
        """
        Recursively merge override config into base config.

        Args:
            base: Base configuration dictionary (modified in place)
            override: Override configuration dictionary
        """
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _set_nested_value(self, config: Dict, path: str, value: Any) -> None:
        """
        Set a nested configuration value using dot notation.

        Args:
            config: Configuration dictionary
            path: Dot-separated path to the value
            value: Value to set
        """
        keys = path.split(".")
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _validate_config(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigError: If configuration is invalid
        """
        targets = self.config.get("targets")
        if isinstance(targets, list):
            if not all(isinstance(t, str) for t in targets):
                raise ConfigError(f"Targets must be strings, got: {targets}", config_key="targets")
        elif targets is not None and not isinstance(targets, str):
            raise ConfigError(f"Invalid targets: {targets}", config_key="targets")

        attempts = self.get("connection.streamableAttempts")
        if isinstance(attempts, bool) or not isinstance(attempts, int) or attempts < 1:
            raise ConfigError(
                f"Streamable attempts must be a positive integer, got: {attempts}",
                config_key="connection.streamableAttempts",
            )

        for key in ("streamableRetryDelay", "sseRetryDelay", "closeDelay"):
            delay = self.get(f"connection.{key}")
            if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0:
                raise ConfigError(f"Delay must be a non-negative number, got: {delay}", config_key=f"connection.{key}")

        timeout = self.get("connection.timeout")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"Timeout must be a positive number, got: {timeout}", config_key="connection.timeout")

        log_level = self.get_log_level()
        valid_levels = ("debug", "info", "warning", "error", "critical")
        if not isinstance(log_level, str) or log_level.lower() not in valid_levels:
            raise ConfigError(f"Invalid log level: {log_level}", config_key="logging.level")

    def get_targets(self) -> Optional[str]:
        """Get the raw comma-separated target list."""
        targets = self.config.get("targets")
        if isinstance(targets, list):
            return ",".join(targets)
        return targets

    def get_log_level(self) -> str:
        """Get runner log level."""
        return self.config.get("logging", {}).get("level", "WARNING")

    def get_log_format(self) -> str:
        """Get log format string."""
        return self.config.get("logging", {}).get(
            "format",
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    def get_log_file(self) -> Optional[str]:
        """Get log file path (None for console only)."""
        return self.config.get("logging", {}).get("file")

    def to_settings(self) -> RunnerSettings:
        """Build the runner settings from the connection and client sections."""
        connection = self.config.get("connection", {})
        client = self.config.get("client", {})
        defaults = RunnerSettings()
        return RunnerSettings(
            streamable_attempts=connection.get("streamableAttempts", defaults.streamable_attempts),
            streamable_retry_delay=float(connection.get("streamableRetryDelay", defaults.streamable_retry_delay)),
            sse_retry_delay=float(connection.get("sseRetryDelay", defaults.sse_retry_delay)),
            close_delay=float(connection.get("closeDelay", defaults.close_delay)),
            timeout=float(connection.get("timeout", defaults.timeout)),
            client_name=client.get("name", defaults.client_name),
            client_version=client.get("version", defaults.client_version),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key.

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        current = self.config

        for k in keys:
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return default

        return current

    def to_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary."""
        return copy.deepcopy(self.config)
