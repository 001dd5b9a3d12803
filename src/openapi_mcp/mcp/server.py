"""
Name: MCP Server.
Description: Provides the MCP Server implementation for serving the tools generated from an OpenAPI document.
Creates the FastMCP instance, registers one tool per operation, and runs it over stdio or SSE.
"""

import logging
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastmcp import FastMCP

from ..openapi.models import ConverterOptions
from ..openapi.spec import OpenAPIDocument
from ..openapi.tools import FastMCPOpenAPITool, OpenAPIToolkit
from .config import MCPServerConfig

logger = logging.getLogger(__name__)


class MCPServer:
    """MCP Server implementation."""

    def __init__(self, toolkit: OpenAPIToolkit, config: MCPServerConfig):
        """Initialize an MCP server.

        Args:
            toolkit: Toolkit holding the generated tools
            config: Server configuration
        """
        self.toolkit = toolkit
        self.config = config

        # Create FastMCP instance
        self.mcp = self._create_mcp_instance()

    def _create_mcp_instance(self) -> FastMCP:
        """Create a FastMCP instance for this server.

        Returns:
            FastMCP instance
        """
        mcp = FastMCP(
            self.config.name,
            instructions=self.config.instructions,
            version=self.config.version,
        )

        # Register tools
        for tool in self.toolkit.get_tools():
            mcp.add_tool(FastMCPOpenAPITool(tool))
            logger.debug(f"Registered tool: {tool.name}")

        logger.info(f"Registered {len(self.toolkit.get_tools())} tools on {self.config.name}")
        return mcp

    def create_app(self) -> FastAPI:
        """Create the HTTP application serving the MCP server over SSE.

        Returns:
            FastAPI app with a health check and the mounted SSE endpoints
        """
        app = FastAPI(
            title=self.config.name,
            description=f"MCP server for {self.config.name}",
        )

        # Add health check endpoint
        @app.get("/health")
        async def health_check():
            return {
                "status": "ok",
                "server": self.config.server_name,
                "tools": len(self.toolkit.get_tools()),
            }

        # Mount the FastMCP SSE sub-application (/sse and /messages/)
        app.mount("/", self.mcp.http_app(transport="sse"))
        return app

    def run(self):
        """Serve until interrupted, using the configured transport."""
        if self.config.transport == "sse":
            logger.info(
                f"Starting SSE server {self.config.name} on {self.config.host}:{self.config.port}"
            )
            uvicorn.run(
                self.create_app(),
                host=self.config.host,
                port=self.config.port,
                log_level="debug" if self.config.debug else "warning",
            )
        else:
            logger.info(f"Starting stdio server {self.config.name}")
            self.mcp.run()


def create_mcp_server(
    document: OpenAPIDocument,
    config: Optional[MCPServerConfig] = None,
    options: Optional[ConverterOptions] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> MCPServer:
    """Create an MCP server from an OpenAPI document.

    Server name and version default to the converter options, then to the
    document's info section.

    Args:
        document: The OpenAPI document
        config: Server configuration
        options: Converter options
        client: Client shared by all tools

    Returns:
        MCP server

    Raises:
        ConversionError: If any operation cannot be converted
    """
    config = config or MCPServerConfig()
    options = options or ConverterOptions()

    toolkit = OpenAPIToolkit(document, options=options, client=client, timeout=config.timeout)

    updates = {}
    if options.server_name or "name" not in config.model_fields_set:
        updates["name"] = toolkit.server_name
    if config.version is None:
        updates["version"] = toolkit.version or None
    if config.instructions is None and document.get_info().get("description"):
        updates["instructions"] = document.get_info()["description"]
    if updates:
        config = config.model_copy(update=updates)

    return MCPServer(toolkit, config)
