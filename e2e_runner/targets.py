"""
Target resolution for the MCP E2E runner.

Turns the comma-separated target setting into an ordered list of URLs and
checks that each one is an absolute http(s) URL before it is dialled.
"""

from typing import List, Optional

import httpx

from .config import DEFAULT_TARGET
from .errors import InvalidTargetError


def resolve_targets(raw: Optional[str]) -> List[str]:
    """
    Split a comma-separated target string into URLs.

    Entries are trimmed and empty entries dropped; order and duplicates are
    kept as given. A missing or blank value resolves to the default target.

    Args:
        raw: Comma-separated URLs, e.g. the ``E2E_TARGETS`` value

    Returns:
        Ordered list of target URLs (never empty)
    """
    if raw is None or not raw.strip():
        return [DEFAULT_TARGET]

    targets = [entry.strip() for entry in raw.split(",")]
    targets = [entry for entry in targets if entry]
    return targets or [DEFAULT_TARGET]


def validate_target(url: str) -> httpx.URL:
    """
    Parse a target URL, rejecting anything that is not absolute http(s).

    Raises:
        InvalidTargetError: If the URL is malformed or not absolute
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidTargetError(f"Malformed target URL: {e}", target=url)

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidTargetError("Target must be an absolute http(s) URL", target=url)
    return parsed


def sse_candidates(url: str) -> List[str]:
    """
    Build the SSE fallback URLs for a target.

    The target itself always comes first. Unless its path already ends in
    ``/sse``, a second candidate has ``/sse`` appended to the path, replacing
    a trailing slash if there is one.
    """
    parsed = validate_target(url)
    path = parsed.path
    if path.endswith("/sse"):
        return [url]

    if path.endswith("/"):
        sse_path = path[:-1] + "/sse"
    else:
        sse_path = path + "/sse"
    return [url, str(parsed.copy_with(path=sse_path))]
