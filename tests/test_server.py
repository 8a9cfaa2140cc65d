"""Tests for the router and the stdio server loop."""

import asyncio
import io
import json

import pytest

from confluence_mcp.server.protocol import METHOD_NOT_FOUND, INVALID_PARAMS, PARSE_ERROR
from confluence_mcp.server.router import Router
from confluence_mcp.server.server import RawMCPServer
from confluence_mcp.server.transport import RawStdioTransport
from confluence_mcp.tools import ALL_TOOLS, dispatch


def _lines(*messages):
    out = []
    for m in messages:
        out.append(m if isinstance(m, bytes) else json.dumps(m).encode())
    return b"\n".join(out) + b"\n"


async def _serve(payload: bytes, hooks=()):
    reader = asyncio.StreamReader()
    reader.feed_data(payload)
    reader.feed_eof()
    stdout = io.BytesIO()

    srv = RawMCPServer(RawStdioTransport(reader=reader, stdout=stdout))
    srv.register_tools(ALL_TOOLS, dispatch)
    for hook in hooks:
        srv.on_shutdown(hook)
    await srv.run()

    return [json.loads(line) for line in stdout.getvalue().splitlines()]


class TestRouter:
    @pytest.mark.asyncio
    async def test_tools_list(self):
        router = Router()
        router.register_tools(ALL_TOOLS, dispatch)
        result = await router.route({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        assert len(result["tools"]) == 5

    @pytest.mark.asyncio
    async def test_initialized_notification(self):
        router = Router()
        assert await router.route({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None
        assert router.initialized

    @pytest.mark.asyncio
    async def test_dispatcher_crash_becomes_envelope(self):
        async def broken(name, arguments):
            raise KeyError("results")

        router = Router()
        router.register_tools(ALL_TOOLS, broken)
        result = await router.route({
            "jsonrpc": "2.0", "id": 1, "method": "tools/call",
            "params": {"name": "confluence_search", "arguments": {"query": "q"}},
        })
        assert result["isError"] is True
        assert result["content"][0]["text"].startswith("Error: ")


class TestServerLoop:
    @pytest.mark.asyncio
    async def test_handshake_and_list(self, confluence_env):
        responses = await _serve(_lines(
            {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {
                "protocolVersion": "2024-11-05",
                "capabilities": {},
                "clientInfo": {"name": "test-client", "version": "1.0"},
            }},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "tools/list"},
            {"jsonrpc": "2.0", "id": 3, "method": "ping"},
        ))

        assert [r["id"] for r in responses] == [1, 2, 3]
        assert responses[0]["result"]["serverInfo"]["name"] == "confluence-mcp"
        assert len(responses[1]["result"]["tools"]) == 5
        assert responses[2]["result"] == {}

    @pytest.mark.asyncio
    async def test_tool_call_roundtrip(self, client, fake_confluence):
        fake_confluence.add("/space", {"results": [{"id": 1, "key": "OPS", "name": "Ops"}], "size": 1})

        responses = await _serve(_lines(
            {"jsonrpc": "2.0", "id": 7, "method": "tools/call", "params": {
                "name": "confluence_list_spaces", "arguments": {"limit": 1},
            }},
        ))

        text = responses[0]["result"]["content"][0]["text"]
        assert json.loads(text)["spaces"][0]["key"] == "OPS"

    @pytest.mark.asyncio
    async def test_missing_arguments_is_invalid_params(self, client, fake_confluence):
        responses = await _serve(_lines(
            {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"name": "confluence_search"}},
        ))

        assert responses[0]["error"]["code"] == INVALID_PARAMS
        assert fake_confluence.requests == []

    @pytest.mark.asyncio
    async def test_unknown_tool_keeps_serving(self, client):
        responses = await _serve(_lines(
            {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {
                "name": "confluence_delete_page", "arguments": {"pageId": "1"},
            }},
            {"jsonrpc": "2.0", "id": 2, "method": "ping"},
        ))

        assert responses[0]["result"]["isError"] is True
        assert "Unknown" in responses[0]["result"]["content"][0]["text"]
        assert responses[1]["result"] == {}

    @pytest.mark.asyncio
    async def test_unknown_method(self, confluence_env):
        responses = await _serve(_lines({"jsonrpc": "2.0", "id": 1, "method": "resources/list"}))
        assert responses[0]["error"]["code"] == METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_parse_error_then_continue(self, confluence_env):
        responses = await _serve(_lines(b"{not json", {"jsonrpc": "2.0", "id": 2, "method": "ping"}))

        assert responses[0]["id"] is None
        assert responses[0]["error"]["code"] == PARSE_ERROR
        assert responses[1] == {"jsonrpc": "2.0", "id": 2, "result": {}}

    @pytest.mark.asyncio
    async def test_shutdown_hooks_run_on_eof(self, confluence_env):
        closed = []

        async def hook():
            closed.append(True)

        await _serve(b"", hooks=[hook])
        assert closed == [True]
