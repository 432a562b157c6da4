"""CLI entry points for genlayer-mcp.

Commands:
  genlayer-mcp serve                     Run the MCP server on stdio
  genlayer-mcp tools [--json]            List available tools
  genlayer-mcp call <tool> --args JSON   Invoke a tool locally and print the report
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from genlayer_mcp import __version__
from genlayer_mcp.config import ServerConfig, load_config
from genlayer_mcp.mcp_server import GenLayerMCPServer, run_stdio

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="genlayer-mcp",
        description="MCP server for generating GenLayer Intelligent Contracts",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument("--config", default=None, help="Path to genlayer-mcp.yaml")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    # serve
    subparsers.add_parser("serve", help="Run the MCP server over stdio")

    # tools
    p_tools = subparsers.add_parser("tools", help="List available tools")
    p_tools.add_argument("--json", action="store_true", dest="json_output", help="Output as JSON")

    # call
    p_call = subparsers.add_parser("call", help="Invoke a tool and print its report")
    p_call.add_argument("tool", help="Tool name")
    source = p_call.add_mutually_exclusive_group()
    source.add_argument("--args", default=None, dest="tool_args", help="Tool arguments as a JSON object")
    source.add_argument("--args-file", default=None, help="Path to a JSON file with tool arguments")

    args = parser.parse_args(argv)

    # stdout carries the MCP stream, logs go to stderr
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    if not args.verbose:
        logging.getLogger().setLevel(config.log_level)

    if args.command == "serve":
        asyncio.run(run_stdio(config))
    elif args.command == "tools":
        cmd_tools(args, config)
    elif args.command == "call":
        sys.exit(asyncio.run(cmd_call(args, config)))


def cmd_tools(args: argparse.Namespace, config: ServerConfig) -> None:
    """List tools with their descriptions."""
    app = GenLayerMCPServer(config)
    listed = app.list_tools()

    if getattr(args, "json_output", False):
        print(json.dumps(listed, indent=2))
        return

    for tool in listed:
        print(f"{tool['name']:<32s} {tool['description']}")


def _load_tool_args(args: argparse.Namespace) -> dict:
    if args.args_file:
        raw = Path(args.args_file).read_text()
    elif args.tool_args:
        raw = args.tool_args
    else:
        return {}

    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("Tool arguments must be a JSON object")
    return data


async def cmd_call(args: argparse.Namespace, config: ServerConfig) -> int:
    """Run one tool call. Returns the process exit code."""
    try:
        tool_args = _load_tool_args(args)
    except (OSError, ValueError) as e:
        print(f"Error: could not read tool arguments: {e}", file=sys.stderr)
        return 2

    app = GenLayerMCPServer(config)
    result = await app.call_tool(args.tool, tool_args)
    if result.is_error:
        print(result.content, file=sys.stderr)
        return 1
    print(result.content)
    return 0
