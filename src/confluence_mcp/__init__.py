"""Confluence MCP server — read/search Confluence tools over stdio."""

__version__ = "1.0.0"
