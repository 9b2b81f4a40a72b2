"""
MCP E2E Runner - command line entry point

Runs the E2E scenario against every configured target in order and exits
non-zero on the first failure.
"""

import argparse
import asyncio
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .config import Config
from .errors import ConfigError
from .scenario import ScenarioRunner
from .targets import resolve_targets


logger = logging.getLogger(__name__)


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "target"):
            log_data["target"] = record.target

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(config: Config, verbose: bool = False) -> None:
    """
    Set up logging configuration.

    Args:
        config: Configuration object
        verbose: Whether to enable verbose logging
    """
    log_level = logging.DEBUG if verbose else getattr(logging, config.get_log_level().upper(), logging.WARNING)
    log_format = config.get_log_format()
    log_file = config.get_log_file()

    if log_format.lower() == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # The SDK and httpx are chatty at INFO
    if not verbose:
        for name in ("httpx", "mcp"):
            logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="End-to-end checks for MCP weather servers over Streamable HTTP or SSE",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_e2e.py
  E2E_TARGETS=http://127.0.0.1:8080/mcp,http://127.0.0.1:8081/sse python run_e2e.py
  python run_e2e.py --targets http://localhost:8080/mcp --verbose
        """
    )

    parser.add_argument(
        "--targets",
        type=str,
        default=None,
        help="Comma-separated target URLs (overrides E2E_TARGETS)"
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON configuration file"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error", "critical"],
        default=None,
        help="Override log level"
    )

    return parser.parse_args(argv)


def describe_error(error: BaseException) -> str:
    message = str(error)
    name = type(error).__name__
    return f"{name}: {message}" if message else name


async def main(argv: Optional[List[str]] = None, runner: Optional[ScenarioRunner] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command-line arguments (defaults to ``sys.argv[1:]``)
        runner: Scenario runner to use; built from configuration if omitted

    Returns:
        Exit code (0 for success, 1 for any failure)
    """
    args = parse_arguments(argv)

    try:
        config = Config(args.config)
    except ConfigError as e:
        print(f"\nE2E failed: {describe_error(e)}", file=sys.stderr)
        return 1

    if args.targets is not None:
        config.config["targets"] = args.targets
    if args.log_level:
        config.config["logging"]["level"] = args.log_level

    setup_logging(config, args.verbose)
    logger.debug(f"Effective configuration: {json.dumps(config.to_dict())}")

    targets = resolve_targets(config.get_targets())
    print("[info] E2E targets ->\n  " + "\n  ".join(targets))

    runner = runner or ScenarioRunner(config.to_settings())
    try:
        await runner.run_all(targets)
    except Exception as e:
        logger.debug("E2E run aborted", exc_info=True)
        print(f"\nE2E failed: {describe_error(e)}", file=sys.stderr)
        return 1

    print("\nAll E2E checks passed.")
    return 0


def run() -> None:
    """Console script entry point."""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
