# Tool registry for MCP server
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Awaitable

from pydantic import BaseModel, ValidationError

from mcp_git_command.config import ServerConfig
from mcp_git_command.git import CommitArguments, commit_files, render_exception, render_report
from mcp_git_command.mcp.errors import InvalidArguments, UnknownOperation
from mcp_git_command.mcp.schemas import TOOL_SCHEMAS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredTool:
    name: str
    input_model: type[BaseModel]
    handler: Callable[[Any], Awaitable[dict[str, Any]]]


TOOL_REGISTRY: dict[str, RegisteredTool] = {}

def tool(name: str, input_model: type[BaseModel]):
    def deco(fn):
        TOOL_REGISTRY[name] = RegisteredTool(name=name, input_model=input_model, handler=fn)
        return fn
    return deco


# Active configuration (set by the server on startup)
_config: ServerConfig | None = None


def set_config(config: ServerConfig) -> None:
    """Set the configuration used by tool handlers."""
    global _config
    _config = config


def get_config() -> ServerConfig:
    """Get the active configuration, falling back to defaults."""
    global _config
    if _config is None:
        _config = ServerConfig()
    return _config


def text_content(text: str, is_error: bool = False) -> dict[str, Any]:
    """Build an MCP tool result envelope with a single text block."""
    result: dict[str, Any] = {
        "content": [
            {
                "type": "text",
                "text": text
            }
        ]
    }
    if is_error:
        result["isError"] = True
    return result


def list_tools() -> list[dict[str, Any]]:
    """List all registered tools with their schemas.

    Returns copies, so callers cannot alter the registered descriptors.
    """
    tools = []
    for tool_name in TOOL_REGISTRY.keys():
        schema = TOOL_SCHEMAS.get(tool_name, {})
        tools.append({
            "name": tool_name,
            "description": schema.get("description", ""),
            "inputSchema": copy.deepcopy(schema.get("inputSchema", {
                "type": "object",
                "properties": {},
                "required": []
            }))
        })
    return tools


async def invoke_tool(name: Any, arguments: dict[str, Any] | None) -> dict[str, Any]:
    """Validate arguments and run a registered tool.

    Args:
        name: Tool name from tools/call
        arguments: Raw argument object from tools/call

    Returns:
        The tool's result envelope

    Raises:
        UnknownOperation: If no tool is registered under name
        InvalidArguments: If arguments don't match the tool's input model
    """
    registered = TOOL_REGISTRY.get(name) if isinstance(name, str) else None
    if registered is None:
        raise UnknownOperation(name)

    try:
        parsed = registered.input_model.model_validate(arguments or {})
    except ValidationError as e:
        errors = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        raise InvalidArguments(name, errors) from e

    logger.debug(f"Invoking tool {name}")
    return await registered.handler(parsed)


@tool("git-commit", CommitArguments)
async def git_commit(arguments: CommitArguments) -> dict[str, Any]:
    """Stage the given files and commit them with the given message.

    Failures never raise: they are reported in the text with isError set.
    """
    config = get_config()
    try:
        result = await commit_files(
            arguments,
            git_executable=config.git_executable,
            timeout=config.command_timeout
        )
    except Exception as e:
        logger.error(f"git-commit raised in {arguments.directory}: {e}", exc_info=True)
        return text_content(render_exception(arguments, e), is_error=True)

    if result.succeeded:
        logger.info(f"Committed {len(arguments.files)} file(s) in {arguments.directory}")
    else:
        logger.info(f"git-commit failed ({result.failure_kind.value}) in {arguments.directory}")
    return text_content(render_report(result), is_error=not result.succeeded)
