"""
Raw STDIO Transport — newline-delimited JSON-RPC

Reads from stdin, writes to stdout.
NEVER pollutes stdout with logs: stdout carries protocol frames only.
"""

import asyncio
import json
import sys
from typing import Any, BinaryIO, Dict, Optional

from confluence_mcp.server.logger import get_logger
from confluence_mcp.server.protocol import ProtocolError, PARSE_ERROR, INVALID_REQUEST

log = get_logger("transport")

# Upper bound for a single request line.
_READ_LIMIT = 2**22


class RawStdioTransport:
    """Line-oriented JSON-RPC transport over a byte stream pair."""

    def __init__(
        self,
        reader: Optional[asyncio.StreamReader] = None,
        stdout: Optional[BinaryIO] = None,
    ):
        self.running = False
        self._reader = reader
        self._stdout = stdout

    async def start(self):
        """Attach an async reader to stdin and a direct writer to stdout."""
        if self._reader is None:
            loop = asyncio.get_running_loop()
            self._reader = asyncio.StreamReader(limit=_READ_LIMIT)
            protocol = asyncio.StreamReaderProtocol(self._reader)
            await loop.connect_read_pipe(lambda: protocol, sys.stdin.buffer)

        if self._stdout is None:
            self._stdout = sys.stdout.buffer
        self.running = True
        log.debug("Transport initialized")

    async def read_message(self) -> Optional[Dict[str, Any]]:
        """
        Read one JSON-RPC message.
        Returns the parsed message, or None on EOF.
        Raises ProtocolError(PARSE_ERROR) for a line that is not valid JSON.
        """
        if self._reader is None:
            raise RuntimeError("Transport not started")

        while True:
            try:
                raw_bytes = await self._reader.readline()
            except ValueError as exc:
                log.error(f"Oversized message dropped: {exc}")
                raise ProtocolError(INVALID_REQUEST, "Message exceeds size limit")
            if not raw_bytes:
                return None
            if raw_bytes.strip():
                break

        try:
            return json.loads(raw_bytes)
        except json.JSONDecodeError as exc:
            log.error(f"JSON parse error: {exc}")
            raise ProtocolError(PARSE_ERROR, f"Parse error: {exc}")

    async def write_message(self, message: Dict[str, Any]):
        """Write a JSON-RPC message to stdout as a single line."""
        if self._stdout is None:
            raise RuntimeError("Transport not started")

        raw_text = json.dumps(message, separators=(",", ":")) + "\n"
        self._stdout.write(raw_text.encode("utf-8"))
        self._stdout.flush()

    async def close(self):
        self.running = False
        log.debug("Transport closed")
