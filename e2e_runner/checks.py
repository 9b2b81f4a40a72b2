"""
Tool listing and tool invocation checks.

Responses from the MCP SDK are pydantic models, but anything exposing the
same fields (including plain mappings) is accepted. Shape checks happen
once, when the raw response is turned into a ``ToolCatalog`` or a list of
``ContentItem``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import ContractAssertionError


logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 80


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


@dataclass(frozen=True)
class ToolCatalog:
    """Tool names advertised by a server, in server order."""
    names: Tuple[str, ...]

    @classmethod
    def from_result(cls, result: Any) -> "ToolCatalog":
        tools = _field(result, "tools")
        if not isinstance(tools, list):
            raise ContractAssertionError("tools list must be an array")
        return cls(names=tuple(_field(tool, "name") for tool in tools))

    def __contains__(self, name: str) -> bool:
        return name in self.names


@dataclass(frozen=True)
class ContentItem:
    """One typed item of a tool call result."""
    type: str
    text: Optional[Any] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "ContentItem":
        return cls(type=_field(raw, "type", ""), text=_field(raw, "text"))


def content_items(result: Any) -> List[ContentItem]:
    """Return the content items of a tool call result."""
    return [ContentItem.from_raw(raw) for raw in _field(result, "content") or []]


def extract_text(result: Any) -> Any:
    """Return the text of the first ``text`` item, or ``""`` if there is none."""
    for item in content_items(result):
        if item.type == "text":
            return item.text if item.text is not None else ""
    return ""


def pick_arguments(name: str) -> Dict[str, Any]:
    """Canonical arguments for the known weather tools; empty for others."""
    if name == "get_alerts":
        return {"state": "CA"}
    if name == "get_forecast":
        return {"latitude": 37.7749, "longitude": -122.4194}
    return {}


def preview(text: str, limit: int = PREVIEW_LENGTH) -> str:
    return text[:limit] + ("…" if len(text) > limit else "")


async def list_tool_names(session) -> List[str]:
    """
    Request ``tools/list`` and return the advertised tool names.

    Raises:
        ContractAssertionError: If the response has no list of tools
    """
    catalog = ToolCatalog.from_result(await session.list_tools())
    print(f"[ok] tools/list -> {', '.join(str(name) for name in catalog.names)}")
    return list(catalog.names)


async def call_tool_text(session, name: str) -> str:
    """
    Call ``name`` with its canonical arguments and return the text output.

    Raises:
        ContractAssertionError: If the result carries no non-empty text
    """
    result = await session.call_tool(name, pick_arguments(name))
    if _field(result, "isError", False):
        logger.debug(f"Tool {name} reported an error result")

    text = extract_text(result)
    if not isinstance(text, str) or not text:
        raise ContractAssertionError(f"tool {name} returned empty text")

    print(f"[ok] tools/call {name} -> {preview(text)}")
    return text
