"""Shared fixtures for confluence-mcp tests."""

import os
import tempfile

# Keep log files out of the real home directory; must run before any import.
os.environ.setdefault("CONFLUENCE_MCP_DATA_DIR", tempfile.mkdtemp(prefix="confluence-mcp-"))

import httpx
import pytest

from confluence_mcp.api.client import ConfluenceClient
from confluence_mcp.config import Config
from confluence_mcp.tools import confluence_tools

BASE_URL = "https://example.atlassian.net/wiki"


@pytest.fixture
def tmp_data_dir(tmp_path, monkeypatch):
    """Point Config paths at a temp directory for isolated tests."""
    data_dir = tmp_path / ".confluence-mcp"
    monkeypatch.setattr(Config, "DATA_DIR", data_dir)
    monkeypatch.setattr(Config, "LOG_DIR", data_dir / "logs")
    monkeypatch.setattr(Config, "LOG_FILE", data_dir / "logs" / "confluence-mcp.log")
    monkeypatch.setattr(Config, "ERROR_LOG", data_dir / "logs" / "confluence-mcp-errors.log")
    return data_dir


@pytest.fixture
def confluence_env(monkeypatch):
    """A fully configured Confluence connection."""
    monkeypatch.setattr(Config, "BASE_URL", BASE_URL)
    monkeypatch.setattr(Config, "EMAIL", "agent@example.com")
    monkeypatch.setattr(Config, "API_TOKEN", "secret-token")
    monkeypatch.setattr(Config, "DEFAULT_LIMIT", 50)


@pytest.fixture
def missing_env(monkeypatch):
    monkeypatch.setattr(Config, "BASE_URL", "")
    monkeypatch.setattr(Config, "EMAIL", "")
    monkeypatch.setattr(Config, "API_TOKEN", "")


class FakeConfluence:
    """Canned Confluence REST responses keyed by path, recording every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, path, body, status=200):
        self.routes[f"/wiki/rest/api{path}"] = (status, body)

    def paths(self):
        return [r.url.path for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(
            request.url.path, (404, {"statusCode": 404, "message": "No route in fake"})
        )
        if isinstance(body, Exception):
            raise body
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def fake_confluence():
    return FakeConfluence()


@pytest.fixture
def client(fake_confluence, confluence_env):
    """ConfluenceClient wired to the fake backend and injected into the tools."""
    c = ConfluenceClient(
        BASE_URL,
        "agent@example.com",
        "secret-token",
        transport=httpx.MockTransport(fake_confluence.handler),
    )
    confluence_tools.set_client(c)
    yield c
    confluence_tools.set_client(None)
