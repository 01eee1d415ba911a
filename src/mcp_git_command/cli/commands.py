from __future__ import annotations
import argparse
import asyncio
import json
import logging
import sys
from dotenv import load_dotenv

from mcp_git_command.config import ServerConfig, load_config

logger = logging.getLogger(__name__)


def configure_logging(config: ServerConfig) -> None:
    """Send all logging to stderr; stdout is reserved for protocol records."""
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=config.log_format,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-git-command",
        description="MCP Git Command - stage and commit files over MCP stdio"
    )
    parser.add_argument("--config", help="Path to YAML configuration file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Override configured log level")
    parser.add_argument("--timeout", type=float,
                        help="Override per-command timeout in seconds")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("serve", help="Run the MCP server on stdin/stdout (default)")
    sub.add_parser("tools", help="Print the tool descriptors as JSON")

    commit = sub.add_parser("commit", help="Stage and commit files once, print the report")
    commit.add_argument("--directory", required=True, help="Working tree to commit in")
    commit.add_argument("--message", "-m", required=True, help="Commit message")
    commit.add_argument("files", nargs="+", help="Files to stage, relative to --directory")

    return parser


def _apply_overrides(config: ServerConfig, args: argparse.Namespace) -> ServerConfig:
    updates = {}
    if args.log_level:
        updates["log_level"] = args.log_level
    if args.timeout is not None:
        updates["command_timeout"] = args.timeout
    if not updates:
        return config
    return ServerConfig.model_validate({**config.model_dump(), **updates})


async def _commit_once(args: argparse.Namespace) -> int:
    from mcp_git_command.mcp.errors import InvalidArguments
    from mcp_git_command.mcp.tools import invoke_tool

    try:
        result = await invoke_tool("git-commit", {
            "files": args.files,
            "message": args.message,
            "directory": args.directory,
        })
    except InvalidArguments as e:
        for err in e.errors:
            print(f"Invalid argument {'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 2

    print(result["content"][0]["text"])
    return 1 if result.get("isError") else 0


def run(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    # Load environment variables first
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _apply_overrides(load_config(args.config), args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Server error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config)

    from mcp_git_command.mcp import server
    from mcp_git_command.mcp.tools import list_tools, set_config

    set_config(config)

    if args.cmd == "tools":
        print(json.dumps({"tools": list_tools()}, indent=2))
        return

    if args.cmd == "commit":
        sys.exit(asyncio.run(_commit_once(args)))

    server.main(config)


if __name__ == "__main__":
    run()
