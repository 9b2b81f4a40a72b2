"""
Error definitions for the MCP E2E runner.

This module defines custom exception classes for the failures a run can
report: bad configuration, malformed targets, exhausted connection attempts
and contract (shape or content) assertion failures.
"""

from typing import Sequence


class E2EError(Exception):
    """Base exception for all runner errors."""

    def __init__(self, message: str, target: str = None):
        """
        Initialize the runner error.

        Args:
            message: Error message
            target: Target URL the error relates to (optional)
        """
        self.message = message
        self.target = target
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with the target if available."""
        if self.target:
            return f"[{self.target}] {self.message}"
        return self.message


class ConfigError(E2EError):
    """Error in configuration."""

    def __init__(self, message: str, config_key: str = None):
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error (optional)
        """
        self.config_key = config_key
        super().__init__(message)

    def _format_message(self) -> str:
        """Format the error message with config key if available."""
        base_message = super()._format_message()
        if self.config_key:
            return f"{base_message} (config: {self.config_key})"
        return base_message


class InvalidTargetError(E2EError):
    """Target URL is not an absolute http(s) URL."""


class ConnectionFailedError(E2EError):
    """Every transport attempt for a target failed."""

    def __init__(self, message: str, target: str = None, transports: Sequence[str] = (), attempts: int = 0):
        """
        Initialize the connection error.

        Args:
            message: Error message
            target: Target URL that could not be reached
            transports: Names of the transports that were tried
            attempts: Total number of connection attempts made
        """
        self.transports = list(transports)
        self.attempts = attempts
        super().__init__(message, target)

    def _format_message(self) -> str:
        """Format the error message with the attempt count if available."""
        base_message = super()._format_message()
        if self.attempts:
            return f"{base_message} ({self.attempts} attempts)"
        return base_message


class ContractAssertionError(E2EError, AssertionError):
    """A server response violated the expected shape or content."""
