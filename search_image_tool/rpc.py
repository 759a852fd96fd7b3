"""Minimal MCP JSON-RPC dispatcher: initialize, tools/list, tools/call."""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from mcp.types import LATEST_PROTOCOL_VERSION

from .errors import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND, PARSE_ERROR, ProtocolError
from .tool import SearchImagesTool

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"


def parse_message(body: bytes) -> Dict[str, Any]:
    """Decode one JSON-RPC message from a request body."""
    try:
        message = json.loads(body)
    except ValueError:
        raise ProtocolError(PARSE_ERROR, "Parse error: body is not valid JSON")
    if isinstance(message, list):
        raise ProtocolError(INVALID_REQUEST, "Invalid Request: batch messages are not supported")
    if not isinstance(message, dict) or message.get("jsonrpc") != JSONRPC_VERSION:
        raise ProtocolError(INVALID_REQUEST, "Invalid Request: expected a JSON-RPC 2.0 object")
    if not isinstance(message.get("method"), str):
        raise ProtocolError(INVALID_REQUEST, "Invalid Request: missing method")
    return message


def is_initialize_request(message: Dict[str, Any]) -> bool:
    return message.get("method") == "initialize" and "id" in message


def result_response(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: Any, error: ProtocolError) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_error()}


class McpDispatcher:
    """Routes JSON-RPC requests to the search tool.

    Tool failures come back as ``isError`` results from the tool itself; only
    envelope problems (unknown method, unknown tool, bad params) become JSON-RPC errors.
    """

    def __init__(self, tool: SearchImagesTool, server_name: str, server_version: str):
        self.tool = tool
        self.server_name = server_name
        self.server_version = server_version
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]] = {
            "initialize": self._initialize,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    async def dispatch(self, message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Handle one parsed message. Returns None for notifications."""
        method = message["method"]
        if "id" not in message:
            logger.debug("Received notification %s", method)
            return None

        request_id = message["id"]
        handler = self._handlers.get(method)
        if handler is None:
            return error_response(request_id, ProtocolError(METHOD_NOT_FOUND, f"Method not found: {method}"))

        params = message.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return error_response(request_id, ProtocolError(INVALID_PARAMS, "Invalid params: expected an object"))

        try:
            result = await handler(params)
        except ProtocolError as e:
            return error_response(request_id, e)
        except Exception:
            logger.exception("Error handling %s", method)
            return error_response(request_id, ProtocolError(INTERNAL_ERROR, "Internal error"))
        return result_response(request_id, result)

    async def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
        logger.info("Initializing session for %s (protocol %s)", (params.get("clientInfo") or {}).get("name", "unknown client"), version)
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": self.server_name, "version": self.server_version},
        }

    async def _list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": [self.tool.definition]}

    async def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if name != self.tool.name:
            raise ProtocolError(INVALID_PARAMS, f"Unknown tool: {name}")
        return await self.tool.call(params.get("arguments"))
