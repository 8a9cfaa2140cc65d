"""
Confluence Tools — read/search access to a Confluence site

Tools:
  confluence_get_page         — Page by ID, or by title + space key
  confluence_search           — CQL search
  confluence_get_space_pages  — Pages in a space
  confluence_get_child_pages  — Direct children of a page
  confluence_list_spaces      — Spaces visible to the account
"""

from typing import Any, Dict, List, Optional

from confluence_mcp.api.client import ConfluenceClient
from confluence_mcp.api.errors import ConfluenceError, PageNotFoundError
from confluence_mcp.config import Config
from confluence_mcp.server.logger import get_logger
from confluence_mcp.server.protocol import error_result, text_content, tool_result_content
from confluence_mcp.tools.formatting import (
    compact,
    dig,
    html_to_plain_text,
    page_url,
    space_url,
    to_text,
)

log = get_logger("tools.confluence")

_client: Optional[ConfluenceClient] = None


def set_client(client: Optional[ConfluenceClient]):
    """Called at startup to inject the shared Confluence client."""
    global _client
    _client = client


class InvalidArgumentError(ValueError):
    """A tool argument is missing or malformed."""


def _limit_property(noun: str) -> Dict[str, Any]:
    return {
        "type": "number",
        "description": f"Maximum number of {noun} to return (default: {Config.DEFAULT_LIMIT})",
        "default": Config.DEFAULT_LIMIT,
    }


TOOLS: List[Dict[str, Any]] = [
    {
        "name": "confluence_get_page",
        "description": "Get a Confluence page by ID or title",
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "The ID of the Confluence page",
                },
                "pageTitle": {
                    "type": "string",
                    "description": "The title of the Confluence page (alternative to ID)",
                },
                "spaceKey": {
                    "type": "string",
                    "description": "The space key where the page is located (required if using title)",
                },
                "includeBody": {
                    "type": "boolean",
                    "description": "Whether to include the page body content (default: true)",
                    "default": True,
                },
            },
            "oneOf": [
                {"required": ["pageId"]},
                {"required": ["pageTitle", "spaceKey"]},
            ],
        },
    },
    {
        "name": "confluence_search",
        "description": "Search for Confluence pages",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "CQL (Confluence Query Language) search query",
                },
                "limit": _limit_property("results"),
            },
            "required": ["query"],
        },
    },
    {
        "name": "confluence_get_space_pages",
        "description": "List all pages in a Confluence space",
        "inputSchema": {
            "type": "object",
            "properties": {
                "spaceKey": {
                    "type": "string",
                    "description": "The key of the Confluence space",
                },
                "limit": _limit_property("pages"),
            },
            "required": ["spaceKey"],
        },
    },
    {
        "name": "confluence_get_child_pages",
        "description": "Get child pages of a specific Confluence page",
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "The ID of the parent page",
                },
                "limit": _limit_property("child pages"),
            },
            "required": ["pageId"],
        },
    },
    {
        "name": "confluence_list_spaces",
        "description": "List all Confluence spaces you have access to",
        "inputSchema": {
            "type": "object",
            "properties": {
                "limit": _limit_property("spaces"),
            },
        },
    },
]


async def handle_tool(name: str, args: Dict[str, Any]) -> Dict[str, Any]:
    handlers = {
        "confluence_get_page": _get_page,
        "confluence_search": _search,
        "confluence_get_space_pages": _get_space_pages,
        "confluence_get_child_pages": _get_child_pages,
        "confluence_list_spaces": _list_spaces,
    }

    handler = handlers.get(name)
    if not handler:
        return error_result(f"Unknown tool: {name}")

    try:
        result = await handler(args)
    except (InvalidArgumentError, ConfluenceError) as exc:
        log.warning(f"Tool {name} failed: {exc}")
        return error_result(str(exc) or "An error occurred")
    except Exception as exc:
        log.error(f"Tool {name} failed: {exc}", exc_info=True)
        return error_result(str(exc) or "An error occurred")

    return tool_result_content([text_content(to_text(result))])


# -- argument helpers --

def _client_or_raise() -> ConfluenceClient:
    if _client is None:
        raise RuntimeError("Confluence client is not configured")
    return _client


def _require(args: Dict[str, Any], key: str) -> str:
    value = args.get(key)
    if value is None or value == "":
        raise InvalidArgumentError(f"Missing required argument: {key}")
    return str(value)


def _limit(args: Dict[str, Any]) -> int:
    """Caller-supplied result ceiling; 0 or absent means the default."""
    raw = args.get("limit")
    if not raw:
        return Config.DEFAULT_LIMIT
    if isinstance(raw, bool):
        raise InvalidArgumentError("limit must be a positive number")
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise InvalidArgumentError("limit must be a positive number")
    if limit <= 0:
        raise InvalidArgumentError("limit must be a positive number")
    return limit


def _page_summary(page: Dict[str, Any], site_url: str, space_key: Optional[str] = None) -> Dict[str, Any]:
    """Compact listing entry shared by space and child page listings."""
    key = space_key or dig(page, "space", "key")
    return compact({
        "id": page.get("id"),
        "title": page.get("title"),
        "webUrl": page_url(site_url, key, page.get("id")),
        "lastModified": dig(page, "version", "when"),
        "lastModifiedBy": dig(page, "version", "by", "displayName"),
    })


# -- confluence_get_page: resolve -> fetch --

async def _resolve_page_id(client: ConfluenceClient, args: Dict[str, Any]) -> str:
    """Step one: use pageId, or look the page up by title within a space."""
    page_id = args.get("pageId")
    if page_id:
        return str(page_id)

    title = args.get("pageTitle")
    space_key = args.get("spaceKey")
    if not (title and space_key):
        raise InvalidArgumentError("Either pageId or both pageTitle and spaceKey are required")

    found = await client.find_page_by_title(str(title), str(space_key))
    results = found.get("results") or []
    if not results:
        raise PageNotFoundError(str(title), str(space_key))

    log.debug(f"Resolved '{title}' in {space_key} to page {results[0].get('id')}")
    return str(results[0]["id"])


async def _get_page(args: Dict[str, Any]) -> Dict[str, Any]:
    client = _client_or_raise()
    include_body = args.get("includeBody") is not False

    page_id = await _resolve_page_id(client, args)

    expand = "body.storage,version,space,ancestors" if include_body else "version,space,ancestors"
    page = await client.get_content(page_id, expand)

    space_key = dig(page, "space", "key")
    result = compact({
        "id": page.get("id"),
        "title": page.get("title"),
        "type": page.get("type"),
        "space": dig(page, "space", "name"),
        "spaceKey": space_key,
        "version": dig(page, "version", "number"),
        "webUrl": page_url(client.site_url, space_key, page.get("id")),
        "lastModified": dig(page, "version", "when"),
        "lastModifiedBy": dig(page, "version", "by", "displayName"),
    })

    body = dig(page, "body", "storage", "value")
    if include_body and body:
        result["content"] = html_to_plain_text(body)

    ancestors = page.get("ancestors") or []
    if ancestors:
        result["breadcrumb"] = " > ".join(str(a.get("title", "")) for a in ancestors)

    return result


# -- listings --

async def _search(args: Dict[str, Any]) -> List[Dict[str, Any]]:
    client = _client_or_raise()
    query = _require(args, "query")

    data = await client.search(query, _limit(args))

    return [
        compact({
            "id": item.get("id"),
            "title": item.get("title"),
            "type": item.get("type"),
            "space": dig(item, "space", "name"),
            "spaceKey": dig(item, "space", "key"),
            "webUrl": page_url(client.site_url, dig(item, "space", "key"), item.get("id")),
            "lastModified": dig(item, "version", "when"),
        })
        for item in data.get("results") or []
    ]


async def _get_space_pages(args: Dict[str, Any]) -> Dict[str, Any]:
    client = _client_or_raise()
    space_key = _require(args, "spaceKey")

    data = await client.list_space_pages(space_key, _limit(args))

    return compact({
        "spaceKey": space_key,
        "totalPages": data.get("size"),
        "pages": [_page_summary(p, client.site_url, space_key) for p in data.get("results") or []],
    })


async def _get_child_pages(args: Dict[str, Any]) -> Dict[str, Any]:
    client = _client_or_raise()
    page_id = _require(args, "pageId")

    data = await client.list_child_pages(page_id, _limit(args))

    return compact({
        "parentPageId": page_id,
        "totalChildren": data.get("size"),
        "children": [_page_summary(p, client.site_url) for p in data.get("results") or []],
    })


async def _list_spaces(args: Dict[str, Any]) -> Dict[str, Any]:
    client = _client_or_raise()

    data = await client.list_spaces(_limit(args))

    spaces = [
        compact({
            "id": space.get("id"),
            "key": space.get("key"),
            "name": space.get("name"),
            "type": space.get("type"),
            "description": dig(space, "description", "plain", "value") or "",
            "webUrl": space_url(client.site_url, space.get("key")),
            "homepageId": dig(space, "homepage", "id"),
        })
        for space in data.get("results") or []
    ]

    return compact({
        "totalSpaces": data.get("size"),
        "spaces": spaces,
    })
