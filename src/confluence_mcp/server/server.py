"""
Raw MCP Server — Main Orchestrator

Ties together:
  Transport -> Protocol -> Router -> Tools -> Confluence REST

Flow:
  1. Transport reads one JSON-RPC line from stdin
  2. Protocol validates JSON-RPC 2.0
  3. Router dispatches to the correct handler
  4. Tool dispatcher calls Confluence and reshapes the result
  5. Transport writes the response to stdout

Messages are handled one at a time; the loop ends on EOF or signal.
"""

import asyncio
import signal
from typing import Awaitable, Callable, List, Optional

from confluence_mcp.config import Config
from confluence_mcp.server.logger import get_logger
from confluence_mcp.server.transport import RawStdioTransport
from confluence_mcp.server.protocol import (
    validate_message,
    make_response,
    make_error,
    ProtocolError,
    INTERNAL_ERROR,
)
from confluence_mcp.server.router import Router, ToolDispatcher

log = get_logger("server")


class RawMCPServer:
    """
    Main server orchestrator.

    Usage:
        server = RawMCPServer()
        server.register_tools(TOOLS, dispatch)
        server.on_shutdown(client.aclose)
        await server.run()
    """

    def __init__(self, transport: Optional[RawStdioTransport] = None):
        self._transport = transport or RawStdioTransport()
        self._router = Router()
        self._shutdown_hooks: List[Callable[[], Awaitable[None]]] = []
        self._running = False

    def register_tools(self, tools_list, dispatcher: ToolDispatcher):
        """Register the tool catalog with the router."""
        self._router.register_tools(tools_list, dispatcher)

    def on_shutdown(self, hook: Callable[[], Awaitable[None]]):
        """Register a coroutine function to await during shutdown."""
        self._shutdown_hooks.append(hook)

    @property
    def router(self) -> Router:
        return self._router

    # -- main loop --

    async def run(self):
        """Start the server and process messages until EOF or signal."""
        log.info(f"Starting {Config.SERVER_NAME} v{Config.SERVER_VERSION}")
        await self._transport.start()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, lambda: asyncio.create_task(self.shutdown()))
            except (NotImplementedError, RuntimeError):
                pass

        self._running = True
        log.info(f"Confluence MCP server running on stdio — tools={self._router.tool_count}")

        try:
            while self._running:
                try:
                    msg = await self._transport.read_message()
                except ProtocolError as exc:
                    await self._transport.write_message(make_error(None, exc.code, exc.message))
                    continue
                if msg is None:
                    log.info("EOF on stdin — shutting down")
                    break
                await self._handle_message(msg)

        except asyncio.CancelledError:
            log.info("Server cancelled")
        finally:
            await self.shutdown()

    async def _handle_message(self, msg):
        """Process a single JSON-RPC message."""
        request_id = msg.get("id") if isinstance(msg, dict) else None

        try:
            msg_type = validate_message(msg)
            if msg_type in ("response", "error"):
                # Servers do not issue requests, so there is nothing to correlate.
                return

            result = await self._router.route(msg)
            if result is None or msg_type == "notification":
                return

            await self._transport.write_message(make_response(request_id, result))

        except ProtocolError as exc:
            log.warning(f"Protocol error: {exc.message} (code={exc.code})")
            if request_id is not None:
                await self._transport.write_message(
                    make_error(request_id, exc.code, exc.message, exc.data)
                )

        except Exception as exc:
            log.error(f"Unhandled error: {exc}", exc_info=True)
            if request_id is not None:
                await self._transport.write_message(
                    make_error(request_id, INTERNAL_ERROR, str(exc))
                )

    async def shutdown(self):
        """Graceful shutdown — run hooks, close transport."""
        if not self._running:
            return
        self._running = False

        for hook in self._shutdown_hooks:
            try:
                await hook()
            except Exception as exc:
                log.error(f"Shutdown hook failed: {exc}", exc_info=True)

        await self._transport.close()
        log.info("Server stopped")
