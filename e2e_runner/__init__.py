"""
MCP E2E Runner Package

End-to-end connectivity and contract checks for MCP servers reachable over
Streamable HTTP, with SSE as a fallback transport.
"""

from .checks import (
    ContentItem,
    ToolCatalog,
    call_tool_text,
    extract_text,
    list_tool_names,
    pick_arguments,
)
from .config import Config, RunnerSettings, DEFAULT_TARGET
from .connection import (
    ClientConnection,
    ConnectionAttempt,
    ConnectionNegotiator,
    TransportKind,
)
from .errors import (
    ConfigError,
    ConnectionFailedError,
    ContractAssertionError,
    E2EError,
    InvalidTargetError,
)
from .scenario import ScenarioRunner
from .targets import resolve_targets, sse_candidates, validate_target

__version__ = "1.0.0"
__all__ = [
    "ClientConnection",
    "Config",
    "ConfigError",
    "ConnectionAttempt",
    "ConnectionFailedError",
    "ConnectionNegotiator",
    "ContentItem",
    "ContractAssertionError",
    "DEFAULT_TARGET",
    "E2EError",
    "InvalidTargetError",
    "RunnerSettings",
    "ScenarioRunner",
    "ToolCatalog",
    "TransportKind",
    "call_tool_text",
    "extract_text",
    "list_tool_names",
    "pick_arguments",
    "resolve_targets",
    "sse_candidates",
    "validate_target",
]
