"""Confluence REST API access."""

from confluence_mcp.api.client import ConfluenceClient
from confluence_mcp.api.errors import (
    ConfluenceError,
    ConfluenceAPIError,
    APIUnreachableError,
    PageNotFoundError,
)

__all__ = [
    "ConfluenceClient",
    "ConfluenceError",
    "ConfluenceAPIError",
    "APIUnreachableError",
    "PageNotFoundError",
]
