"""MCP stdio server with JSON-RPC framing.

Implements Model Context Protocol (MCP) for the git-commit tool.
Supports tool listing, schemas, and robust error handling.
"""
import asyncio
import sys
import json
import logging
from typing import Any, TextIO

from mcp_git_command.config import ServerConfig
from mcp_git_command.mcp.errors import InvalidArguments, UnknownOperation
from mcp_git_command.mcp.tools import get_config, invoke_tool, list_tools, set_config

logger = logging.getLogger(__name__)

STARTUP_BANNER = "MCP Git Command Server running on stdio"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


# MCP Protocol Implementation


async def handle_initialize(params: dict[str, Any]) -> dict[str, Any]:
    """Handle MCP initialize request."""
    config = get_config()
    return {
        "protocolVersion": config.protocol_version,
        "capabilities": {
            "tools": {}
        },
        "serverInfo": {
            "name": config.server_name,
            "version": config.server_version
        }
    }


async def handle_ping(params: dict[str, Any]) -> dict[str, Any]:
    return {}


async def handle_tools_list(params: dict[str, Any]) -> dict[str, Any]:
    """List all available tools with their schemas."""
    return {"tools": list_tools()}


async def handle_tools_call(params: dict[str, Any]) -> dict[str, Any]:
    """Call a tool with given parameters."""
    return await invoke_tool(params.get("name"), params.get("arguments"))


# JSON-RPC Handler


MCP_METHODS = {
    "initialize": handle_initialize,
    "ping": handle_ping,
    "tools/list": handle_tools_list,
    "tools/call": handle_tools_call,
}


def error_response(req_id: Any, code: int, message: str, data: Any = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": req_id, "error": error}


async def handle_request(request: Any) -> dict[str, Any] | None:
    """Handle a single JSON-RPC request.

    Returns:
        JSON-RPC response dictionary, or None for notifications
    """
    if not isinstance(request, dict) or not isinstance(request.get("method"), str):
        logger.warning(f"Invalid request: {request!r}")
        req_id = request.get("id") if isinstance(request, dict) else None
        return error_response(req_id, INVALID_REQUEST, "Invalid Request")

    method = request["method"]

    if "id" not in request:
        # Notifications are processed but nothing is ever sent back
        logger.debug(f"Notification received: {method}")
        if not method.startswith("notifications/"):
            response = await dispatch(None, method, request.get("params") or {})
            if "error" in response:
                logger.warning(f"Notification {method} failed: {response['error']['message']}")
        return None

    return await dispatch(request.get("id"), method, request.get("params") or {})


async def dispatch(req_id: Any, method: str, params: Any) -> dict[str, Any]:
    """Run an MCP method and wrap its result or error in a JSON-RPC response."""
    if not isinstance(params, dict):
        return error_response(req_id, INVALID_PARAMS, "Invalid params", {"error": "params must be an object"})

    handler = MCP_METHODS.get(method)
    if handler is None:
        logger.warning(f"Method not found: {method}")
        return error_response(
            req_id,
            METHOD_NOT_FOUND,
            f"Method not found: {method}",
            {"available_methods": list(MCP_METHODS.keys())}
        )

    try:
        result = await handler(params)
        return {
            "jsonrpc": "2.0",
            "id": req_id,
            "result": result
        }

    except UnknownOperation as e:
        logger.warning(str(e))
        return error_response(req_id, METHOD_NOT_FOUND, str(e), {"tool": e.name})

    except InvalidArguments as e:
        # Parameter validation errors
        logger.warning(f"{e}: {e.errors}")
        return error_response(req_id, INVALID_PARAMS, "Invalid params", {"tool": e.name, "errors": e.errors})

    except Exception as e:
        # Unexpected errors
        logger.error(f"Error handling {method}: {e}", exc_info=True)
        return error_response(
            req_id,
            INTERNAL_ERROR,
            "Internal error",
            {"error": str(e), "error_type": type(e).__name__}
        )


def write_message(writer: TextIO, message: dict[str, Any]) -> None:
    writer.write(json.dumps(message) + "\n")
    writer.flush()


async def run_stdio_server(reader: TextIO | None = None, writer: TextIO | None = None) -> None:
    """Run MCP server over stdio with robust JSON-RPC framing.

    Reads JSON-RPC requests from stdin (one per line).
    Writes JSON-RPC responses to stdout (one per line).
    Logs to stderr. An undecodable line is answered with a parse error and
    the loop keeps reading; EOF ends the loop.
    """
    reader = reader or sys.stdin
    writer = writer or sys.stdout

    print(STARTUP_BANNER, file=sys.stderr, flush=True)

    while True:
        # Read request from stdin
        line = reader.readline()
        if not line:
            # EOF - client disconnected
            logger.info("Input closed, shutting down")
            break

        line = line.strip()
        if not line:
            # Empty line - skip
            continue

        try:
            request = json.loads(line)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError, oversized integer literals, and nesting too deep to decode
            logger.warning(f"Discarding malformed record: {e}")
            write_message(writer, error_response(None, PARSE_ERROR, "Parse error", {"error": str(e)}))
            continue

        response = await handle_request(request)
        if response is not None:
            write_message(writer, response)


async def serve(config: ServerConfig) -> None:
    """Install config and serve on the process's stdin/stdout."""
    set_config(config)
    await run_stdio_server()


def main(config: ServerConfig | None = None) -> None:
    """Entry point for MCP server."""
    config = config or get_config()
    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
