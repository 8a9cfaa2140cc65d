"""
Confluence REST client — async, read-only

One method per REST endpoint the tools use. All requests go to
``<base>/rest/api`` with HTTP basic auth (account email + API token).
Non-2xx responses and transport failures are translated into the
ConfluenceError hierarchy; successful responses are returned as parsed JSON.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from confluence_mcp.api.errors import ConfluenceAPIError, APIUnreachableError
from confluence_mcp.config import Config
from confluence_mcp.server.logger import get_logger

log = get_logger("api")

JSON = Dict[str, Any]


def _error_message(response: httpx.Response) -> str:
    """Pull the ``message`` field out of a Confluence error body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Request failed with status code {response.status_code}"


class ConfluenceClient:
    """Thin async wrapper around the Confluence REST API."""

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.site_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=f"{self.site_url}/rest/api",
            auth=httpx.BasicAuth(email, api_token),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ConfluenceClient":
        """Build a client from validated Config settings."""
        Config.validate()
        return cls(
            Config.BASE_URL,
            Config.EMAIL,
            Config.API_TOKEN,
            timeout=Config.TIMEOUT,
            transport=transport,
        )

    async def aclose(self):
        await self._http.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> JSON:
        log.debug(f"GET {path} params={params}")
        try:
            response = await self._http.get(path, params=params)
        except httpx.RequestError as exc:
            raise APIUnreachableError(path, str(exc) or type(exc).__name__) from exc

        if response.is_error:
            message = _error_message(response)
            log.warning(f"GET {path} -> {response.status_code}: {message}")
            raise ConfluenceAPIError(response.status_code, message, endpoint=path)

        try:
            return response.json()
        except ValueError as exc:
            raise ConfluenceAPIError(
                response.status_code, "Confluence returned a non-JSON response", endpoint=path
            ) from exc

    # -- content --

    async def find_page_by_title(self, title: str, space_key: str) -> JSON:
        """Title lookup within a space, limited to a single hit."""
        return await self._get(
            "/content",
            params={"title": title, "spaceKey": space_key, "limit": 1},
        )

    async def get_content(self, page_id: str, expand: str) -> JSON:
        return await self._get(f"/content/{quote(str(page_id), safe='')}", params={"expand": expand})

    async def search(self, cql: str, limit: int, expand: str = "space,version") -> JSON:
        """Run a CQL query."""
        return await self._get(
            "/content/search",
            params={"cql": cql, "limit": limit, "expand": expand},
        )

    async def list_space_pages(self, space_key: str, limit: int, expand: str = "version") -> JSON:
        return await self._get(
            "/content",
            params={"spaceKey": space_key, "limit": limit, "expand": expand, "type": "page"},
        )

    async def list_child_pages(self, page_id: str, limit: int, expand: str = "version,space") -> JSON:
        return await self._get(
            f"/content/{quote(str(page_id), safe='')}/child/page",
            params={"limit": limit, "expand": expand},
        )

    # -- spaces --

    async def list_spaces(self, limit: int, expand: str = "description.plain,homepage") -> JSON:
        return await self._get("/space", params={"limit": limit, "expand": expand})
