"""Tests for JSON-RPC 2.0 protocol module."""

import pytest
from confluence_mcp.server.protocol import (
    validate_message,
    make_response,
    make_error,
    initialize_result,
    tools_list_result,
    tool_result_content,
    text_content,
    error_result,
    MissingArgumentsError,
    ProtocolError,
    INVALID_PARAMS,
)


class TestValidateMessage:
    def test_request(self):
        msg = {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}
        assert validate_message(msg) == "request"

    def test_notification(self):
        msg = {"jsonrpc": "2.0", "method": "notifications/initialized"}
        assert validate_message(msg) == "notification"

    def test_response(self):
        msg = {"jsonrpc": "2.0", "id": 1, "result": {}}
        assert validate_message(msg) == "response"

    def test_error_response(self):
        msg = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32600, "message": "Invalid"}}
        assert validate_message(msg) == "error"

    def test_invalid_not_dict(self):
        with pytest.raises(ProtocolError):
            validate_message(["not", "a", "dict"])

    def test_invalid_wrong_version(self):
        with pytest.raises(ProtocolError):
            validate_message({"jsonrpc": "1.0", "id": 1, "method": "ping"})

    def test_invalid_method_type(self):
        with pytest.raises(ProtocolError):
            validate_message({"jsonrpc": "2.0", "id": 1, "method": 7})

    def test_invalid_no_identifiers(self):
        with pytest.raises(ProtocolError):
            validate_message({"jsonrpc": "2.0"})


class TestResponses:
    def test_make_response(self):
        resp = make_response(1, {"tools": []})
        assert resp == {"jsonrpc": "2.0", "id": 1, "result": {"tools": []}}

    def test_make_error(self):
        err = make_error("abc", -32601, "Unknown method: foo")
        assert err["id"] == "abc"
        assert err["error"] == {"code": -32601, "message": "Unknown method: foo"}

    def test_make_error_null_id(self):
        assert make_error(None, -32700, "Parse error")["id"] is None


class TestMCPBuilders:
    def test_initialize_result(self):
        r = initialize_result("confluence-mcp", "1.0.0", "2024-11-05")
        assert r["protocolVersion"] == "2024-11-05"
        assert r["serverInfo"] == {"name": "confluence-mcp", "version": "1.0.0"}
        assert r["capabilities"] == {"tools": {"listChanged": False}}

    def test_tools_list_result(self):
        tools = [{"name": "t", "description": "d", "inputSchema": {"type": "object"}}]
        assert tools_list_result(tools) == {"tools": tools}

    def test_tool_result_content(self):
        r = tool_result_content([text_content("hello")])
        assert r == {"content": [{"type": "text", "text": "hello"}]}

    def test_error_result(self):
        r = error_result("boom")
        assert r == {"content": [{"type": "text", "text": "Error: boom"}], "isError": True}

    def test_missing_arguments_error(self):
        exc = MissingArgumentsError()
        assert exc.code == INVALID_PARAMS
        assert exc.message == "No arguments provided"
