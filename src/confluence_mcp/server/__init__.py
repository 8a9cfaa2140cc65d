"""Confluence MCP Server — Raw protocol implementation."""

from confluence_mcp.server.server import RawMCPServer
from confluence_mcp.server.router import Router

__all__ = ["RawMCPServer", "Router"]
