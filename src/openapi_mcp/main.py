"""
Name: Command-line interface.
Description: Implements the command-line interface for openapi-mcp with commands for serving an OpenAPI
document as an MCP server, listing the generated tools, and calling a single tool.
"""

import argparse
import json
import logging
import sys
from typing import Optional, Tuple

from .constants import DEFAULT_HOST, DEFAULT_PORT
from .exceptions import OpenAPIMCPError
from .manager import call_tool, list_tools, start_mcp_server
from .mcp.config import MCPServerConfig
from .openapi.models import ConverterOptions
from .utils import get_env_timeout, get_env_tool_prefix, setup_environment

logger = logging.getLogger(__name__)


def parse_address(value: str) -> Tuple[str, int]:
    """Parse a ``[HOST]:PORT`` listen address.

    Args:
        value: Address such as ``:3000`` or ``127.0.0.1:8080``

    Returns:
        Tuple: (host, port)

    Raises:
        argparse.ArgumentTypeError: If the port is not a number
    """
    host, _, port = value.rpartition(":")
    try:
        return host or DEFAULT_HOST, int(port)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid listen address: {value}") from None


def _v2_flag(args) -> Optional[bool]:
    # None lets the document decide
    return True if args.v2 else None


def _timeout(args) -> float:
    return args.timeout if args.timeout is not None else get_env_timeout()


def _converter_options(args) -> ConverterOptions:
    return ConverterOptions(
        server_name=getattr(args, "server_name", None),
        version=getattr(args, "server_version", None),
        tool_name_prefix=args.prefix if args.prefix is not None else get_env_tool_prefix(),
    )


def serve_command(args):
    """Serve an OpenAPI document as an MCP server."""
    config = MCPServerConfig(timeout=_timeout(args), debug=args.debug)
    if args.sse:
        host, port = args.sse
        config = config.model_copy(update={"transport": "sse", "host": host, "port": port})

    start_mcp_server(
        args.file,
        config=config,
        v2=_v2_flag(args),
        options=_converter_options(args),
    )


def list_tools_command(args):
    """Print the generated tool definitions as JSON."""
    tools = list_tools(args.file, v2=_v2_flag(args), options=_converter_options(args))
    print(json.dumps(tools, indent=2))


def call_command(args):
    """Invoke one generated tool and print the result."""
    try:
        arguments = json.loads(args.args)
    except json.JSONDecodeError as e:
        raise OpenAPIMCPError(f"--args is not valid JSON: {e}") from e
    if not isinstance(arguments, dict):
        raise OpenAPIMCPError("--args must be a JSON object")

    result = call_tool(
        args.file,
        args.tool,
        arguments,
        v2=_v2_flag(args),
        options=_converter_options(args),
        timeout=_timeout(args),
    )
    print(result.to_text())


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description="openapi-mcp - Serve OpenAPI documents as MCP servers"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_document_args(parser):
        """Add the arguments shared by every command."""
        parser.add_argument(
            "--file",
            type=str,
            required=True,
            help="Path or URL of the OpenAPI document (JSON or YAML)",
        )
        parser.add_argument(
            "--v2", action="store_true", help="Treat the document as Swagger 2.0"
        )
        parser.add_argument(
            "--prefix",
            type=str,
            default=None,
            help="Prefix for generated tool names (default: $OPENAPI_MCP_TOOL_PREFIX)",
        )
        parser.add_argument("--debug", action="store_true", help="Enable debug mode")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start an MCP server")
    add_document_args(serve_parser)
    serve_parser.add_argument(
        "--sse",
        type=parse_address,
        nargs="?",
        const=(DEFAULT_HOST, DEFAULT_PORT),
        default=None,
        metavar="[HOST]:PORT",
        help=f"Serve over SSE instead of stdio (default :{DEFAULT_PORT})",
    )
    serve_parser.add_argument(
        "--server-name", type=str, default=None, help="Name announced by the server"
    )
    serve_parser.add_argument(
        "--version",
        dest="server_version",
        type=str,
        default=None,
        help="Version announced by the server",
    )
    serve_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: $OPENAPI_MCP_TIMEOUT or 30)",
    )

    # List tools command
    list_parser = subparsers.add_parser(
        "list-tools", help="Print the generated tool definitions"
    )
    add_document_args(list_parser)

    # Call command
    call_parser = subparsers.add_parser("call", help="Invoke a single tool")
    add_document_args(call_parser)
    call_parser.add_argument("--tool", type=str, required=True, help="Name of the tool")
    call_parser.add_argument(
        "--args", type=str, default="{}", help="Tool arguments as a JSON object"
    )
    call_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: $OPENAPI_MCP_TIMEOUT or 30)",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_environment(debug=args.debug)

    commands = {
        "serve": serve_command,
        "list-tools": list_tools_command,
        "call": call_command,
    }
    try:
        commands[args.command](args)
    except OpenAPIMCPError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
