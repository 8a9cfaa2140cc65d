"""
JSON-RPC 2.0 Protocol — MCP message construction and validation

Handles:
- Message validation (requests, notifications, responses)
- Success/error response construction
- MCP result payloads: initialize, tools/list, tools/call envelopes
"""

from typing import Any, Dict, List, Optional, Union

JSONRPC_VERSION = "2.0"

RequestId = Optional[Union[int, str]]


class ProtocolError(Exception):
    """JSON-RPC protocol error"""
    def __init__(self, code: int, message: str, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(message)


# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def validate_message(msg: Dict[str, Any]) -> str:
    """
    Validate a JSON-RPC 2.0 message.
    Returns 'request', 'notification', 'response' or 'error'; raises ProtocolError otherwise.
    """
    if not isinstance(msg, dict):
        raise ProtocolError(INVALID_REQUEST, "Message must be a JSON object")

    if msg.get("jsonrpc") != JSONRPC_VERSION:
        raise ProtocolError(INVALID_REQUEST, f"Expected jsonrpc={JSONRPC_VERSION}")

    if "method" in msg:
        if not isinstance(msg["method"], str):
            raise ProtocolError(INVALID_REQUEST, "Method must be a string")
        return "request" if "id" in msg else "notification"
    if "id" in msg and "result" in msg:
        return "response"
    if "id" in msg and "error" in msg:
        return "error"
    raise ProtocolError(INVALID_REQUEST, "Cannot determine message type")


def make_response(request_id: RequestId, result: Any) -> Dict[str, Any]:
    """Build a JSON-RPC success response."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "result": result,
    }


def make_error(
    request_id: RequestId,
    code: int,
    message: str,
    data: Any = None,
) -> Dict[str, Any]:
    """Build a JSON-RPC error response."""
    error = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": error,
    }


# --- MCP-specific payloads ---

def initialize_result(
    server_name: str,
    server_version: str,
    protocol_version: str,
) -> Dict[str, Any]:
    """Build the MCP initialize result. Only the tools capability is advertised."""
    return {
        "protocolVersion": protocol_version,
        "capabilities": {"tools": {"listChanged": False}},
        "serverInfo": {
            "name": server_name,
            "version": server_version,
        },
    }


def tools_list_result(tools: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Build the MCP tools/list result."""
    return {"tools": tools}


def text_content(text: str) -> Dict[str, Any]:
    """Build a text content block."""
    return {"type": "text", "text": text}


def tool_result_content(
    content: List[Dict[str, Any]],
    is_error: bool = False,
) -> Dict[str, Any]:
    """Build the MCP tools/call result envelope."""
    result = {"content": content}
    if is_error:
        result["isError"] = True
    return result


def error_result(message: str) -> Dict[str, Any]:
    """Error envelope with a single ``Error: <message>`` text block."""
    return tool_result_content([text_content(f"Error: {message}")], is_error=True)


class MissingArgumentsError(ProtocolError):
    """tools/call arrived without an arguments object."""
    def __init__(self):
        super().__init__(INVALID_PARAMS, "No arguments provided")
