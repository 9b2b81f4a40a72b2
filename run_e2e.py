#!/usr/bin/env python3
"""
MCP E2E Runner - Main Entry Point

Connects to each target in E2E_TARGETS, lists its tools and checks the
get_alerts and get_forecast responses.
"""

from e2e_runner.cli import run


if __name__ == "__main__":
    run()
