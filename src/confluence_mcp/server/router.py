"""
Method Router — Dispatch MCP methods to handlers

Routes:
  initialize       -> server capabilities handshake
  initialized      -> notification (no response)
  tools/list       -> registered tool catalog
  tools/call       -> tool dispatcher
  ping             -> pong
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

from confluence_mcp.config import Config
from confluence_mcp.server.logger import get_logger
from confluence_mcp.server.protocol import (
    initialize_result,
    tools_list_result,
    error_result,
    ProtocolError,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
)

log = get_logger("router")

ToolDispatcher = Callable[[str, Optional[Dict[str, Any]]], Awaitable[Dict[str, Any]]]


class Router:
    """MCP method dispatcher."""

    def __init__(self):
        self._tools: List[Dict[str, Any]] = []
        self._dispatcher: Optional[ToolDispatcher] = None
        self._initialized = False

    def register_tools(self, tools_list: List[Dict[str, Any]], dispatcher: ToolDispatcher):
        """Register the tool catalog and the dispatcher that serves it."""
        self._tools = list(tools_list)
        self._dispatcher = dispatcher
        log.info(f"Registered {len(tools_list)} tools: {[t['name'] for t in tools_list]}")

    async def route(self, msg: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Route a validated message to the appropriate handler.
        Returns the result payload or None for notifications.
        """
        method = msg.get("method", "")
        params = msg.get("params") or {}

        if method == "initialize":
            return self._handle_initialize(params)

        if method in ("initialized", "notifications/initialized"):
            self._initialized = True
            return None

        if method == "notifications/cancelled":
            return None

        if method == "ping":
            return {}

        if method == "tools/list":
            return tools_list_result(self._tools)

        if method == "tools/call":
            return await self._handle_tools_call(params)

        if "id" not in msg:
            # Unknown notifications are ignored
            return None

        raise ProtocolError(METHOD_NOT_FOUND, f"Unknown method: {method}")

    def _handle_initialize(self, params: Dict) -> Dict[str, Any]:
        log.info(
            f"Client initialize: {params.get('clientInfo', {}).get('name', '?')} "
            f"protocol={params.get('protocolVersion', '?')}"
        )
        return initialize_result(
            server_name=Config.SERVER_NAME,
            server_version=Config.SERVER_VERSION,
            protocol_version=Config.PROTOCOL_VERSION,
        )

    async def _handle_tools_call(self, params: Dict) -> Dict[str, Any]:
        name = params.get("name", "")
        if not name:
            raise ProtocolError(INVALID_PARAMS, "Missing tool name")
        if self._dispatcher is None:
            return error_result(f"Unknown tool: {name}")

        try:
            return await self._dispatcher(name, params.get("arguments"))
        except ProtocolError:
            raise
        except Exception as exc:
            log.error(f"Tool {name} error: {exc}", exc_info=True)
            return error_result(str(exc) or "An error occurred")

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def tool_count(self) -> int:
        return len(self._tools)
