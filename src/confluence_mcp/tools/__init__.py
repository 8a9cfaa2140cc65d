"""
Confluence MCP Tools

Modules:
  confluence_tools — 5 read/search tools over the Confluence REST API
  formatting       — reshaping helpers (HTML to text, browse URLs)
"""

from typing import Any, Dict, Optional

from confluence_mcp.server.protocol import (
    MissingArgumentsError,
    ProtocolError,
    INVALID_PARAMS,
    error_result,
)
from confluence_mcp.tools import confluence_tools

ALL_TOOLS = confluence_tools.TOOLS

_DISPATCH = {}
for tool_def in confluence_tools.TOOLS:
    _DISPATCH[tool_def["name"]] = confluence_tools.handle_tool


async def dispatch(name: str, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Unified dispatcher: resolve the tool, validate its arguments, then run it."""
    handler = _DISPATCH.get(name)
    if not handler:
        return error_result(f"Unknown tool: {name}")

    if not arguments:
        raise MissingArgumentsError()
    if not isinstance(arguments, dict):
        raise ProtocolError(INVALID_PARAMS, "Tool arguments must be an object")

    return await handler(name, arguments)
