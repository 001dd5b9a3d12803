"""MCP server module for openapi-mcp."""

from .config import MCPServerConfig
from .server import MCPServer, create_mcp_server

__all__ = ["MCPServer", "MCPServerConfig", "create_mcp_server"]
